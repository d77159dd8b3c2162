"""Assemble per-target results into the project-wide AST.

The stage is resolved first since sprites fall back to its variables, lists
and broadcasts. Sprites only read the stage scope, so the sprite phase can
run on a thread pool; the shared interner is the only mutable state they
touch.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Set, Tuple

from .block_resolver import resolve_target_blocks
from .constants import DEFAULT_WORKERS, EXTENSION_PREFIXES
from .diagnostics import DiagnosticCollector, DiagnosticContext
from .errors import InvalidProjectFormat
from .nodes import Background, ParsedScratchProject, Sprite
from .project_io import Sb3File, load_sb3
from .raw_model import RawProject, RawTarget
from .resources import Interner, ResourcePath
from .scope import Scope, build_scope


def intern_resources(resources: Dict[str, bytes], interner: Interner) -> Dict[ResourcePath, bytes]:
    """One handle per archive entry, allocated in entry-name order."""
    return {interner.intern(name): resources[name] for name in sorted(resources)}


def find_stage(project: RawProject) -> Tuple[RawTarget, List[RawTarget]]:
    stages = [t for t in project.targets if t.is_stage]
    if len(stages) != 1:
        raise InvalidProjectFormat(f"expected exactly one stage target, found {len(stages)}")
    sprites = [t for t in project.targets if not t.is_stage]
    return stages[0], sprites


def collect_extensions_from_blocks(target: RawTarget, extensions: Set[str]) -> None:
    for block in target.blocks.values():
        prefix = block.opcode.split("_", 1)[0] if "_" in block.opcode else ""
        ext = EXTENSION_PREFIXES.get(prefix)
        if ext:
            extensions.add(ext)


def note_undeclared_extensions(target: RawTarget, declared: Tuple[str, ...], diag: DiagnosticContext) -> None:
    used: Set[str] = set()
    collect_extensions_from_blocks(target, used)
    for ext in sorted(used - set(declared)):
        diag.info(f"Extension '{ext}' is used but not declared in project.json")


def parse_background(
    stage: RawTarget, interner: Interner, extensions: Tuple[str, ...]
) -> Tuple[Background, Scope, DiagnosticContext]:
    diag = DiagnosticContext(target_name=stage.name)
    scope = build_scope(stage, interner)
    note_undeclared_extensions(stage, extensions, diag)
    background = Background(
        variables=scope.variable_decls,
        lists=scope.list_decls,
        broadcasts=scope.broadcast_names,
        blocks=resolve_target_blocks(stage, scope, diag),
        definitions=scope.definitions,
    )
    return background, scope, diag


def parse_sprite(
    target: RawTarget, interner: Interner, stage_scope: Scope, extensions: Tuple[str, ...]
) -> Tuple[Sprite, DiagnosticContext]:
    diag = DiagnosticContext(target_name=target.name)
    scope = build_scope(target, interner, parent=stage_scope)
    note_undeclared_extensions(target, extensions, diag)
    sprite = Sprite(
        name=target.name,
        variables=scope.variable_decls,
        lists=scope.list_decls,
        blocks=resolve_target_blocks(target, scope, diag),
        definitions=scope.definitions,
    )
    return sprite, diag


def parse_project(
    sb3: Sb3File,
    workers: int = DEFAULT_WORKERS,
    diagnostics: Optional[DiagnosticCollector] = None,
    interner: Optional[Interner] = None,
) -> ParsedScratchProject:
    """Resolve a loaded archive into a ParsedScratchProject.

    Any error aborts the whole parse and is raised unchanged; no partial AST
    is returned. Diagnostics are added to ``diagnostics`` in target order once
    every target has been resolved.
    """
    interner = interner if interner is not None else Interner()
    project = sb3.project
    extensions = project.extensions

    resources = intern_resources(sb3.resources, interner)
    stage, sprite_targets = find_stage(project)
    background, stage_scope, stage_diag = parse_background(stage, interner, extensions)

    if workers > 1 and len(sprite_targets) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(
                lambda target: parse_sprite(target, interner, stage_scope, extensions),
                sprite_targets,
            ))
    else:
        results = [parse_sprite(target, interner, stage_scope, extensions) for target in sprite_targets]

    if diagnostics is not None:
        diagnostics.add_context_diagnostics(stage_diag)
        diagnostics.extend(diag for _, diag in results)

    return ParsedScratchProject(
        resources=resources,
        sprites=tuple(sprite for sprite, _ in results),
        background=background,
        extensions=extensions,
    )


def parse_sb3(
    path: str,
    workers: int = DEFAULT_WORKERS,
    diagnostics: Optional[DiagnosticCollector] = None,
) -> ParsedScratchProject:
    """Load an .sb3 file from disk and resolve it."""
    return parse_project(load_sb3(path), workers=workers, diagnostics=diagnostics)
