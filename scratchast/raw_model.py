"""Typed mirror of project.json, faithful to its on-disk shapes.

Nothing here resolves references: block ids, variable ids and broadcast ids
are kept as the opaque strings the file uses. See ``decode`` for how the
JSON is turned into these records.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .values import ScratchValue


class RotationStyle(Enum):
    ALL_AROUND = "all around"
    LEFT_RIGHT = "left-right"
    DONT_ROTATE = "don't rotate"

    @classmethod
    def from_tag(cls, tag: Any) -> "RotationStyle":
        """Closed tag with a fallback: anything unrecognised is ``all around``."""
        if tag == cls.LEFT_RIGHT.value:
            return cls.LEFT_RIGHT
        if tag == cls.DONT_ROTATE.value:
            return cls.DONT_ROTATE
        return cls.ALL_AROUND


class ImageFormat(Enum):
    PNG = "png"
    SVG = "svg"


class ShadowMarker(Enum):
    SHADOW_ONLY = 1
    BLOCK_ONLY = 2
    BLOCK_OVER_SHADOW = 3


class ListEncoding(Enum):
    # [[key, value], ...]
    PAIRS = "pairs"
    # [value, ...]
    VALUES = "values"


@dataclass(frozen=True)
class BlockRef:
    block_id: str


@dataclass(frozen=True)
class LiteralPayload:
    tag: int
    value: ScratchValue


@dataclass(frozen=True)
class BroadcastPayload:
    name: str
    broadcast_id: str


@dataclass(frozen=True)
class VariablePayload:
    name: str
    variable_id: str
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass(frozen=True)
class ListPayload:
    name: str
    list_id: str
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass(frozen=True)
class EmptyPayload:
    """An input slot that holds ``null`` (for instance an emptied substack)."""


RawInputPayload = Union[BlockRef, LiteralPayload, BroadcastPayload, VariablePayload, ListPayload, EmptyPayload]


@dataclass(frozen=True)
class RawInput:
    shadow: ShadowMarker
    primary: RawInputPayload
    shadow_value: Optional[RawInputPayload] = None

    @property
    def effective(self) -> RawInputPayload:
        """The payload that takes precedence; with both present the real block wins."""
        if isinstance(self.primary, EmptyPayload) and self.shadow_value is not None:
            return self.shadow_value
        return self.primary


@dataclass(frozen=True)
class RawField:
    value: Optional[ScratchValue]
    ref_id: Optional[str] = None


@dataclass(frozen=True)
class RawBlock:
    opcode: str
    next: Optional[str]
    parent: Optional[str]
    inputs: Dict[str, RawInput] = field(default_factory=dict)
    fields: Dict[str, RawField] = field(default_factory=dict)
    top_level: bool = False
    shadow: bool = False
    mutation: Optional[Dict[str, Any]] = None
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass(frozen=True)
class RawVariable:
    name: str
    value: ScratchValue
    is_cloud: bool = False


ListItem = Union[ScratchValue, Tuple[ScratchValue, ScratchValue]]


@dataclass(frozen=True)
class RawList:
    name: str
    items: Tuple[ListItem, ...]
    encoding: ListEncoding = ListEncoding.PAIRS


@dataclass(frozen=True)
class Costume:
    name: str
    data_format: ImageFormat
    asset_id: str
    md5ext: str
    rotation_center_x: float
    rotation_center_y: float
    bitmap_resolution: Optional[float] = None


@dataclass(frozen=True)
class Sound:
    name: str
    asset_id: str
    data_format: str
    md5ext: str
    rate: float = 0
    sample_count: float = 0


@dataclass(frozen=True)
class RawTarget:
    is_stage: bool
    name: str
    variables: Dict[str, RawVariable]
    lists: Dict[str, RawList]
    broadcasts: Dict[str, str]
    blocks: Dict[str, RawBlock]
    top_level_reporters: Dict[str, RawInputPayload] = field(default_factory=dict)
    costumes: Tuple[Costume, ...] = ()
    sounds: Tuple[Sound, ...] = ()
    current_costume: int = 0
    volume: float = 100
    layer_order: int = 0
    x: float = 0
    y: float = 0
    size: float = 0
    direction: float = 0
    draggable: bool = False
    rotation_style: RotationStyle = RotationStyle.ALL_AROUND

    def variables_by_name(self) -> Dict[str, Tuple[str, RawVariable]]:
        """Display name -> (variable id, declaration)."""
        return {var.name: (var_id, var) for var_id, var in self.variables.items()}

    def lists_by_name(self) -> Dict[str, Tuple[str, RawList]]:
        return {lst.name: (list_id, lst) for list_id, lst in self.lists.items()}


@dataclass(frozen=True)
class ProjectMeta:
    semver: str
    vm: str = ""
    agent: str = ""


@dataclass(frozen=True)
class RawProject:
    targets: Tuple[RawTarget, ...]
    extensions: Tuple[str, ...]
    meta: ProjectMeta
