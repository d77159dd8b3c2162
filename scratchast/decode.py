"""Decode project.json text into the raw format model.

The object envelope is checked against ``schema.PROJECT_SCHEMA``. The tuple
encodings are untagged unions, so each one is decoded by an ordered list of
shape matchers: every matcher returns the decoded value or ``None`` and the
first hit wins. When two shapes could both fit, the more specific one is
listed first.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from jsonschema.exceptions import best_match

from .constants import (
    BLOCK_ONLY,
    BLOCK_OVER_SHADOW,
    BROADCAST_TAG,
    LIST_TAG,
    LITERAL_TAGS,
    SHADOW_ONLY,
    VARIABLE_TAG,
)
from .errors import InvalidInputFormat, InvalidProjectFormat
from .raw_model import (
    BlockRef,
    BroadcastPayload,
    Costume,
    EmptyPayload,
    ImageFormat,
    ListEncoding,
    ListItem,
    ListPayload,
    LiteralPayload,
    ProjectMeta,
    RawBlock,
    RawField,
    RawInput,
    RawInputPayload,
    RawList,
    RawProject,
    RawTarget,
    RawVariable,
    RotationStyle,
    ShadowMarker,
    Sound,
    VariablePayload,
)
from .schema import PROJECT_VALIDATOR, format_error_path
from .values import ScratchValue, as_scratch_value, is_scratch_value

T = TypeVar("T")
Matcher = Callable[[Any], Optional[T]]


def first_match(raw: Any, matchers: Sequence[Matcher]) -> Optional[Any]:
    """Try each matcher in order and return the first decoded value."""
    for matcher in matchers:
        result = matcher(raw)
        if result is not None:
            return result
    return None


def _is_tag(raw: Any) -> bool:
    return isinstance(raw, int) and not isinstance(raw, bool)


def _is_number(raw: Any) -> bool:
    return isinstance(raw, (int, float)) and not isinstance(raw, bool)


def _is_tuple(raw: Any, length: int) -> bool:
    return isinstance(raw, list) and len(raw) == length


# ---------------------------------------------------------------------------
# Input payloads
# ---------------------------------------------------------------------------

def match_block_ref(raw: Any) -> Optional[BlockRef]:
    if isinstance(raw, str):
        return BlockRef(raw)
    return None


def match_literal(raw: Any) -> Optional[LiteralPayload]:
    if not _is_tuple(raw, 2) or not _is_tag(raw[0]) or raw[0] not in LITERAL_TAGS:
        return None
    value = as_scratch_value(raw[1])
    if value is None:
        return None
    return LiteralPayload(raw[0], value)


def match_reference(raw: Any) -> Optional[Union[BroadcastPayload, VariablePayload, ListPayload]]:
    if not _is_tuple(raw, 3) or not _is_tag(raw[0]):
        return None
    tag, name, ref_id = raw
    if not isinstance(name, str) or not isinstance(ref_id, str):
        return None
    if tag == BROADCAST_TAG:
        return BroadcastPayload(name, ref_id)
    if tag == VARIABLE_TAG:
        return VariablePayload(name, ref_id)
    if tag == LIST_TAG:
        return ListPayload(name, ref_id)
    return None


def match_positioned_reference(raw: Any) -> Optional[Union[VariablePayload, ListPayload]]:
    if not _is_tuple(raw, 5) or not _is_tag(raw[0]):
        return None
    tag, name, ref_id, x, y = raw
    if not isinstance(name, str) or not isinstance(ref_id, str):
        return None
    if not _is_number(x) or not _is_number(y):
        return None
    if tag == VARIABLE_TAG:
        return VariablePayload(name, ref_id, float(x), float(y))
    if tag == LIST_TAG:
        return ListPayload(name, ref_id, float(x), float(y))
    return None


def match_empty(raw: Any) -> Optional[EmptyPayload]:
    if raw is None:
        return EmptyPayload()
    return None


PAYLOAD_MATCHERS: Tuple[Matcher, ...] = (
    match_block_ref,
    match_literal,
    match_reference,
    match_positioned_reference,
    match_empty,
)


def decode_payload(raw: Any) -> Optional[RawInputPayload]:
    return first_match(raw, PAYLOAD_MATCHERS)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

def match_single_input(raw: Any) -> Optional[RawInput]:
    if not _is_tuple(raw, 2) or not _is_tag(raw[0]) or raw[0] not in (SHADOW_ONLY, BLOCK_ONLY):
        return None
    payload = decode_payload(raw[1])
    if payload is None:
        return None
    return RawInput(ShadowMarker(raw[0]), payload)


def match_double_input(raw: Any) -> Optional[RawInput]:
    if not _is_tuple(raw, 3) or not _is_tag(raw[0]) or raw[0] != BLOCK_OVER_SHADOW:
        return None
    primary = decode_payload(raw[1])
    shadow = decode_payload(raw[2])
    if primary is None or shadow is None:
        return None
    return RawInput(ShadowMarker.BLOCK_OVER_SHADOW, primary, shadow)


INPUT_MATCHERS: Tuple[Matcher, ...] = (match_single_input, match_double_input)


def decode_input(raw: Any, block_id: str = "", slot: str = "") -> RawInput:
    result = first_match(raw, INPUT_MATCHERS)
    if result is None:
        raise InvalidInputFormat(f"block {block_id!r} input {slot!r}: unrecognised shape {raw!r}")
    return result


# ---------------------------------------------------------------------------
# Fields, variables and lists
# ---------------------------------------------------------------------------

def _match_field_value(raw: Any) -> Tuple[bool, Optional[ScratchValue]]:
    if raw is None:
        return True, None
    value = as_scratch_value(raw)
    return value is not None, value


def match_field_with_id(raw: Any) -> Optional[RawField]:
    if not _is_tuple(raw, 2) or not (raw[1] is None or isinstance(raw[1], str)):
        return None
    ok, value = _match_field_value(raw[0])
    if not ok:
        return None
    return RawField(value, raw[1])


def match_field_value_only(raw: Any) -> Optional[RawField]:
    if not _is_tuple(raw, 1):
        return None
    ok, value = _match_field_value(raw[0])
    if not ok:
        return None
    return RawField(value)


FIELD_MATCHERS: Tuple[Matcher, ...] = (match_field_with_id, match_field_value_only)


def match_cloud_variable(raw: Any) -> Optional[RawVariable]:
    if not _is_tuple(raw, 3) or not isinstance(raw[0], str) or not isinstance(raw[2], bool):
        return None
    value = as_scratch_value(raw[1])
    if value is None:
        return None
    return RawVariable(raw[0], value, raw[2])


def match_variable(raw: Any) -> Optional[RawVariable]:
    if not _is_tuple(raw, 2) or not isinstance(raw[0], str):
        return None
    value = as_scratch_value(raw[1])
    if value is None:
        return None
    return RawVariable(raw[0], value)


VARIABLE_MATCHERS: Tuple[Matcher, ...] = (match_cloud_variable, match_variable)


def match_paired_list(raw: Any) -> Optional[RawList]:
    if not _is_tuple(raw, 2) or not isinstance(raw[0], str) or not isinstance(raw[1], list):
        return None
    items: List[ListItem] = []
    for entry in raw[1]:
        if not _is_tuple(entry, 2) or not all(is_scratch_value(part) for part in entry):
            return None
        items.append((as_scratch_value(entry[0]), as_scratch_value(entry[1])))
    return RawList(raw[0], tuple(items), ListEncoding.PAIRS)


def match_plain_list(raw: Any) -> Optional[RawList]:
    if not _is_tuple(raw, 2) or not isinstance(raw[0], str) or not isinstance(raw[1], list):
        return None
    items: List[ListItem] = []
    for entry in raw[1]:
        value = as_scratch_value(entry)
        if value is None:
            return None
        items.append(value)
    return RawList(raw[0], tuple(items), ListEncoding.VALUES)


LIST_MATCHERS: Tuple[Matcher, ...] = (match_paired_list, match_plain_list)


def _decode_table(entries: Dict[str, Any], matchers: Sequence[Matcher], what: str, owner: str) -> Dict[str, Any]:
    table: Dict[str, Any] = {}
    for entry_id, raw in entries.items():
        result = first_match(raw, matchers)
        if result is None:
            raise InvalidProjectFormat(f"{owner}: {what} {entry_id!r} has unrecognised shape {raw!r}")
        table[entry_id] = result
    return table


# ---------------------------------------------------------------------------
# Blocks, assets, targets
# ---------------------------------------------------------------------------

def decode_block(block_id: str, raw: Dict[str, Any]) -> RawBlock:
    inputs = {
        slot: decode_input(value, block_id, slot)
        for slot, value in raw.get("inputs", {}).items()
    }
    fields: Dict[str, RawField] = {}
    for slot, value in raw.get("fields", {}).items():
        decoded = first_match(value, FIELD_MATCHERS)
        if decoded is None:
            raise InvalidProjectFormat(f"block {block_id!r} field {slot!r}: unrecognised shape {value!r}")
        fields[slot] = decoded
    return RawBlock(
        opcode=raw["opcode"],
        next=raw.get("next"),
        parent=raw.get("parent"),
        inputs=inputs,
        fields=fields,
        top_level=raw["topLevel"],
        shadow=raw.get("shadow", False),
        mutation=raw.get("mutation"),
        x=raw.get("x"),
        y=raw.get("y"),
    )


def decode_top_level_reporter(block_id: str, raw: List[Any]) -> RawInputPayload:
    payload = first_match(raw, (match_positioned_reference, match_reference))
    if not isinstance(payload, (VariablePayload, ListPayload)):
        raise InvalidProjectFormat(f"block {block_id!r}: unrecognised top-level reporter {raw!r}")
    return payload


def decode_costume(raw: Dict[str, Any]) -> Costume:
    try:
        data_format = ImageFormat(raw["dataFormat"])
    except ValueError:
        raise InvalidProjectFormat(
            f"costume {raw['name']!r}: unsupported dataFormat {raw['dataFormat']!r}"
        ) from None
    return Costume(
        name=raw["name"],
        data_format=data_format,
        asset_id=raw["assetId"],
        md5ext=raw["md5ext"],
        rotation_center_x=float(raw["rotationCenterX"]),
        rotation_center_y=float(raw["rotationCenterY"]),
        bitmap_resolution=raw.get("bitmapResolution"),
    )


def decode_sound(raw: Dict[str, Any]) -> Sound:
    return Sound(
        name=raw["name"],
        asset_id=raw["assetId"],
        data_format=raw["dataFormat"],
        md5ext=raw["md5ext"],
        rate=raw.get("rate", 0),
        sample_count=raw.get("sampleCount", 0),
    )


def decode_target(raw: Dict[str, Any]) -> RawTarget:
    name = raw["name"]
    owner = f"target {name!r}"

    blocks: Dict[str, RawBlock] = {}
    reporters: Dict[str, RawInputPayload] = {}
    for block_id, block in raw["blocks"].items():
        if isinstance(block, list):
            reporters[block_id] = decode_top_level_reporter(block_id, block)
        else:
            blocks[block_id] = decode_block(block_id, block)

    return RawTarget(
        is_stage=raw["isStage"],
        name=name,
        variables=_decode_table(raw["variables"], VARIABLE_MATCHERS, "variable", owner),
        lists=_decode_table(raw["lists"], LIST_MATCHERS, "list", owner),
        broadcasts=dict(raw["broadcasts"]),
        blocks=blocks,
        top_level_reporters=reporters,
        costumes=tuple(decode_costume(c) for c in raw["costumes"]),
        sounds=tuple(decode_sound(s) for s in raw["sounds"]),
        current_costume=raw.get("currentCostume", 0),
        volume=raw.get("volume", 100),
        layer_order=raw.get("layerOrder", 0),
        x=raw.get("x", 0),
        y=raw.get("y", 0),
        size=raw.get("size", 0),
        direction=raw.get("direction", 0),
        draggable=raw.get("draggable", False),
        rotation_style=RotationStyle.from_tag(raw.get("rotationStyle")),
    )


def load_project_json(text: Union[str, bytes]) -> Any:
    try:
        if isinstance(text, bytes):
            text = text.decode("utf-8-sig")
        return json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidProjectFormat(str(exc)) from exc


def decode_project(text: Union[str, bytes]) -> RawProject:
    """Decode the text of ``project.json`` into a RawProject."""
    data = load_project_json(text)
    error = best_match(PROJECT_VALIDATOR.iter_errors(data))
    if error is not None:
        raise InvalidProjectFormat(f"{format_error_path(error.absolute_path)}: {error.message}")

    meta = data["meta"]
    return RawProject(
        targets=tuple(decode_target(t) for t in data["targets"]),
        extensions=tuple(data.get("extensions", [])),
        meta=ProjectMeta(
            semver=meta["semver"],
            vm=meta.get("vm", ""),
            agent=meta.get("agent", ""),
        ),
    )
