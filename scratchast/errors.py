"""Typed errors raised while loading and resolving a Scratch project.

Every failure is fatal to the current parse: the pipeline either returns a
complete AST or raises exactly one of these.
"""

from typing import Optional


class Sb3Error(Exception):
    """Base class for all project loading and resolution errors."""

    def __init__(self, message: str, detail: str = ""):
        self.message = message
        self.detail = detail
        super().__init__(message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class MissingProjectDescriptor(Sb3Error):
    def __init__(self, detail: str = ""):
        super().__init__("missing `project.json`", detail)


class UnreadableArchive(Sb3Error):
    def __init__(self, detail: str = ""):
        super().__init__("unable to read project archive", detail)


class InvalidProjectFormat(Sb3Error):
    def __init__(self, detail: str = ""):
        super().__init__("invalid `project.json` format", detail)


class InvalidInputFormat(Sb3Error):
    def __init__(self, detail: str = ""):
        super().__init__("invalid block input", detail)


class UnresolvedReference(Sb3Error):
    """A variable, list or broadcast id found in neither the local nor the global scope."""

    def __init__(self, name: str, ref_id: Optional[str] = None, target: Optional[str] = None):
        self.name = name
        self.ref_id = ref_id
        self.target = target
        parts = []
        if ref_id is not None:
            parts.append(f"id {ref_id!r}")
        if target is not None:
            parts.append(f"target {target!r}")
        super().__init__(f"unresolved reference '{name}'", ", ".join(parts))


class CyclicBlockChain(Sb3Error):
    def __init__(self, block_id: str, target: Optional[str] = None):
        self.block_id = block_id
        self.target = target
        detail = f"target {target!r}" if target is not None else ""
        super().__init__(f"block '{block_id}' is revisited by its own chain", detail)
