"""Non-fatal diagnostic notices produced while resolving a project.

Fatal problems are raised as errors (see ``errors``); this module only
tracks the soft ones, like opcodes the resolver does not understand yet or
top-level scripts whose trigger is not supported.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional


class DiagnosticLevel(Enum):
    """Severity level for diagnostic messages."""
    WARNING = "Warning"
    INFO = "Info"


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    level: DiagnosticLevel
    message: str
    target: str
    block_id: Optional[str] = None
    opcode: Optional[str] = None

    def __str__(self) -> str:
        loc = f"Target '{self.target}'"
        if self.block_id is not None:
            loc += f" Block '{self.block_id}'"
        result = f"{self.level.value}: {self.message}: {loc}"
        if self.opcode:
            result += f"\n  -> {self.opcode}"
        return result


@dataclass
class DiagnosticContext:
    """Diagnostics collected while resolving a single target."""
    target_name: str = "Stage"
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def add(
        self,
        level: DiagnosticLevel,
        message: str,
        block_id: Optional[str] = None,
        opcode: Optional[str] = None,
    ) -> None:
        self.diagnostics.append(Diagnostic(
            level=level,
            message=message,
            target=self.target_name,
            block_id=block_id,
            opcode=opcode,
        ))

    def warning(self, message: str, block_id: Optional[str] = None, opcode: Optional[str] = None) -> None:
        """Add a warning diagnostic."""
        self.add(DiagnosticLevel.WARNING, message, block_id, opcode)

    def info(self, message: str, block_id: Optional[str] = None, opcode: Optional[str] = None) -> None:
        """Add an info diagnostic."""
        self.add(DiagnosticLevel.INFO, message, block_id, opcode)

    def has_warnings(self) -> bool:
        return any(d.level == DiagnosticLevel.WARNING for d in self.diagnostics)

    def get_warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.level == DiagnosticLevel.WARNING]


class DiagnosticCollector:
    """Project-wide diagnostics, kept in the order targets were resolved."""

    def __init__(self) -> None:
        self.all_diagnostics: List[Diagnostic] = []

    def add_context_diagnostics(self, ctx: DiagnosticContext) -> None:
        self.all_diagnostics.extend(ctx.diagnostics)

    def extend(self, contexts: Iterable[DiagnosticContext]) -> None:
        for ctx in contexts:
            self.add_context_diagnostics(ctx)

    def for_target(self, target_name: str) -> List[Diagnostic]:
        return [d for d in self.all_diagnostics if d.target == target_name]

    def has_warnings(self) -> bool:
        return any(d.level == DiagnosticLevel.WARNING for d in self.all_diagnostics)

    def print_all(self) -> None:
        for diag in self.all_diagnostics:
            print(diag)

    def summary(self) -> str:
        """Counts per level, e.g. ``2 warnings, 1 note``."""
        counts = Counter(d.level for d in self.all_diagnostics)
        parts = []
        for level, noun in ((DiagnosticLevel.WARNING, "warning"), (DiagnosticLevel.INFO, "note")):
            n = counts[level]
            if n:
                parts.append(f"{n} {noun}{'s' if n != 1 else ''}")
        return ", ".join(parts) if parts else "No issues"
