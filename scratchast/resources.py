"""Process-unique handles for named entities (variables, lists, broadcasts, assets, definitions)."""

import threading
from dataclasses import dataclass, field
from itertools import count


@dataclass(frozen=True)
class ResourcePath:
    """Opaque handle; compared and hashed by ``id`` only, ``label`` is for diagnostics."""
    id: int
    label: str = field(default="", compare=False)

    @property
    def js_name(self) -> str:
        return f"${self.id}"

    def __str__(self) -> str:
        return f"{self.label}#{self.id}" if self.label else f"#{self.id}"


class Interner:
    """Allocates ResourcePaths.

    Ids start at 1 and are never reused. Identity is positional: interning the
    same label twice yields two different handles. There is no lookup by
    label, callers keep their own name -> handle maps per scope. Allocation is
    locked so sprite workers can share one interner.
    """

    def __init__(self) -> None:
        self._counter = count(1)
        self._lock = threading.Lock()
        self._allocated = 0

    def intern(self, label: str) -> ResourcePath:
        with self._lock:
            self._allocated += 1
            return ResourcePath(next(self._counter), label)

    def id(self, path: ResourcePath) -> int:
        return path.id

    def label(self, path: ResourcePath) -> str:
        return path.label

    def __len__(self) -> int:
        return self._allocated
