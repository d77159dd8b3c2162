"""Resolved AST handed to downstream consumers.

Every node is immutable. References to variables, lists, broadcasts and
assets are ResourcePaths; no raw block id survives into this tree.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .raw_model import ListItem
from .resources import ResourcePath
from .values import ScratchValue


class KeyId(Enum):
    SPACE = "space"
    UP_ARROW = "up arrow"
    DOWN_ARROW = "down arrow"
    LEFT_ARROW = "left arrow"
    RIGHT_ARROW = "right arrow"
    ANY = "any"
    A = "a"
    B = "b"
    C = "c"
    D = "d"
    E = "e"
    F = "f"
    G = "g"
    H = "h"
    I = "i"
    J = "j"
    K = "k"
    L = "l"
    M = "m"
    N = "n"
    O = "o"
    P = "p"
    Q = "q"
    R = "r"
    S = "s"
    T = "t"
    U = "u"
    V = "v"
    W = "w"
    X = "x"
    Y = "y"
    Z = "z"
    DIGIT_0 = "0"
    DIGIT_1 = "1"
    DIGIT_2 = "2"
    DIGIT_3 = "3"
    DIGIT_4 = "4"
    DIGIT_5 = "5"
    DIGIT_6 = "6"
    DIGIT_7 = "7"
    DIGIT_8 = "8"
    DIGIT_9 = "9"

    @classmethod
    def from_option(cls, option: str) -> Optional["KeyId"]:
        """Map a KEY_OPTION field value to a key, case-insensitively for letters."""
        try:
            return cls(option.lower() if len(option) == 1 else option)
        except ValueError:
            return None


@dataclass(frozen=True, eq=False)
class Literal:
    """Equal only to a Literal of the same value type, so ``False`` and ``0.0`` differ."""
    value: ScratchValue

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return type(self.value) is type(other.value) and self.value == other.value

    def __hash__(self) -> int:
        return hash((type(self.value), self.value))


@dataclass(frozen=True)
class BroadcastRef:
    path: ResourcePath


@dataclass(frozen=True)
class VariableRef:
    path: ResourcePath


@dataclass(frozen=True)
class ListRef:
    path: ResourcePath


@dataclass(frozen=True)
class Operation:
    """An opcode-specific operator; ``args`` follow the slot order in ``opcodes.OPERATORS``."""
    kind: str
    args: Tuple["Block", ...] = ()


@dataclass(frozen=True)
class BlockStack:
    """Statement chain; execution order is sequence order."""
    blocks: Tuple["Block", ...] = ()

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks)


Block = Union[Literal, BroadcastRef, VariableRef, ListRef, BlockStack, Operation]

# Stand-in for any opcode the resolver does not know yet.
ZERO_PLACEHOLDER = Literal(0.0)


@dataclass(frozen=True)
class WhenGreenFlagClicked:
    body: BlockStack


@dataclass(frozen=True)
class WhenKeyPressed:
    key: KeyId
    body: BlockStack


@dataclass(frozen=True)
class WhenBroadcastReceived:
    broadcast: ResourcePath
    body: BlockStack


BlockItem = Union[WhenGreenFlagClicked, WhenKeyPressed, WhenBroadcastReceived]

VariableDecl = Tuple[ResourcePath, ScratchValue]
ListDecl = Tuple[ResourcePath, Tuple[ListItem, ...]]


@dataclass(frozen=True)
class Sprite:
    name: str
    variables: Dict[str, VariableDecl] = field(default_factory=dict)
    lists: Dict[str, ListDecl] = field(default_factory=dict)
    blocks: Tuple[BlockItem, ...] = ()
    # Procedure name -> handle; bodies are not resolved yet.
    definitions: Dict[str, ResourcePath] = field(default_factory=dict)


@dataclass(frozen=True)
class Background:
    """The stage: global variables, lists and broadcasts live here."""
    variables: Dict[str, VariableDecl] = field(default_factory=dict)
    lists: Dict[str, ListDecl] = field(default_factory=dict)
    broadcasts: Dict[str, ResourcePath] = field(default_factory=dict)
    blocks: Tuple[BlockItem, ...] = ()
    definitions: Dict[str, ResourcePath] = field(default_factory=dict)


@dataclass(frozen=True)
class ParsedScratchProject:
    resources: Dict[ResourcePath, bytes]
    sprites: Tuple[Sprite, ...]
    background: Background
    extensions: Tuple[str, ...] = ()

    def resource_named(self, label: str) -> Optional[ResourcePath]:
        """Handle of the archive entry called ``label``, if any."""
        for path in self.resources:
            if path.label == label:
                return path
        return None

    def sprite_named(self, name: str) -> Optional[Sprite]:
        for sprite in self.sprites:
            if sprite.name == name:
                return sprite
        return None
