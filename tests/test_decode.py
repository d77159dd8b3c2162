import json

import pytest

from scratchast.decode import (
    FIELD_MATCHERS,
    LIST_MATCHERS,
    VARIABLE_MATCHERS,
    decode_input,
    decode_payload,
    decode_project,
    first_match,
)
from scratchast.errors import InvalidInputFormat, InvalidProjectFormat
from scratchast.raw_model import (
    BlockRef,
    BroadcastPayload,
    EmptyPayload,
    ImageFormat,
    ListEncoding,
    ListPayload,
    LiteralPayload,
    RawField,
    RawVariable,
    RotationStyle,
    ShadowMarker,
    VariablePayload,
)
from tests._builders import block, project, stage, target


def test_bare_string_payload_is_a_block_reference() -> None:
    assert decode_payload("blockId123") == BlockRef("blockId123")
    # A string that looks like a number is still an id, never a literal.
    assert decode_payload("10") == BlockRef("10")


def test_block_reference_input_wins_over_other_shapes() -> None:
    decoded = decode_input([2, "blockId123"])
    assert decoded.shadow is ShadowMarker.BLOCK_ONLY
    assert decoded.effective == BlockRef("blockId123")


@pytest.mark.parametrize("tag", [4, 5, 6, 7, 8, 9, 10])
def test_literal_tags_share_one_representation(tag: int) -> None:
    payload = decode_payload([tag, "42"])
    assert isinstance(payload, LiteralPayload)
    assert payload.value == "42"


def test_literal_numbers_become_floats() -> None:
    payload = decode_payload([4, 10])
    assert payload == LiteralPayload(4, 10.0)
    assert isinstance(payload.value, float)


def test_reference_payloads() -> None:
    assert decode_payload([11, "go", "b1"]) == BroadcastPayload("go", "b1")
    assert decode_payload([12, "score", "v1"]) == VariablePayload("score", "v1")
    assert decode_payload([13, "items", "l1"]) == ListPayload("items", "l1")


def test_positioned_reference_keeps_coordinates() -> None:
    payload = decode_payload([12, "score", "v1", 10, -5.5])
    assert payload == VariablePayload("score", "v1", 10.0, -5.5)


def test_positioned_broadcast_is_not_a_valid_shape() -> None:
    assert decode_payload([11, "go", "b1", 0, 0]) is None


def test_unknown_payload_tag_is_rejected() -> None:
    assert decode_payload([99, "x"]) is None
    assert decode_payload([3, "x"]) is None
    with pytest.raises(InvalidInputFormat):
        decode_input([1, [99, "x"]], "blk", "STEPS")


def test_null_payload_decodes_as_empty() -> None:
    assert decode_payload(None) == EmptyPayload()


def test_both_present_input_prefers_block() -> None:
    decoded = decode_input([3, "reporter", [4, "10"]])
    assert decoded.shadow is ShadowMarker.BLOCK_OVER_SHADOW
    assert decoded.effective == BlockRef("reporter")
    assert decoded.shadow_value == LiteralPayload(4, "10")


def test_both_present_input_with_emptied_block_falls_back_to_shadow() -> None:
    decoded = decode_input([3, None, [10, "hello"]])
    assert decoded.effective == LiteralPayload(10, "hello")


@pytest.mark.parametrize(
    "raw",
    [
        [4, "10"],
        [1, "a", "b"],
        [3, "a"],
        [0, "a"],
        [True, "a"],
        "a",
        [],
    ],
)
def test_malformed_inputs_are_rejected(raw) -> None:
    with pytest.raises(InvalidInputFormat):
        decode_input(raw, "blk", "SLOT")


def test_variable_shapes() -> None:
    assert first_match(["score", 0], VARIABLE_MATCHERS) == RawVariable("score", 0.0)
    assert first_match(["☁ hi", "x", True], VARIABLE_MATCHERS) == RawVariable("☁ hi", "x", True)
    assert first_match(["bad"], VARIABLE_MATCHERS) is None


def test_list_contents_keep_their_encoding() -> None:
    paired = first_match(["pairs", [["a", 1], ["b", 2]]], LIST_MATCHERS)
    assert paired.encoding is ListEncoding.PAIRS
    assert paired.items == (("a", 1.0), ("b", 2.0))

    plain = first_match(["plain", ["a", 1, True]], LIST_MATCHERS)
    assert plain.encoding is ListEncoding.VALUES
    assert plain.items == ("a", 1.0, True)


def test_mixed_list_is_not_coerced_into_pairs() -> None:
    mixed = first_match(["mixed", [["a", 1], "b"]], LIST_MATCHERS)
    assert mixed is None


def test_field_shapes() -> None:
    assert first_match(["score", "v1"], FIELD_MATCHERS) == RawField("score", "v1")
    assert first_match(["space", None], FIELD_MATCHERS) == RawField("space", None)
    assert first_match(["space"], FIELD_MATCHERS) == RawField("space")
    assert first_match([["nested"], None], FIELD_MATCHERS) is None


def _decode(data) -> object:
    return decode_project(json.dumps(data))


def test_decode_minimal_project() -> None:
    raw = _decode(project(stage(), target("Cat"), extensions=["pen"]))
    assert [t.name for t in raw.targets] == ["Stage", "Cat"]
    assert raw.targets[0].is_stage
    assert raw.extensions == ("pen",)
    assert raw.meta.semver == "3.0.0"
    assert raw.targets[0].costumes[0].data_format is ImageFormat.SVG


def test_decode_accepts_bytes_with_bom() -> None:
    text = "\ufeff" + json.dumps(project(stage()))
    raw = decode_project(text.encode("utf-8"))
    assert raw.targets[0].name == "Stage"


def test_unknown_top_level_keys_are_ignored() -> None:
    data = project(stage())
    data["somethingNew"] = {"x": 1}
    data["targets"][0]["futureField"] = [1, 2, 3]
    assert _decode(data).targets[0].name == "Stage"


def test_invalid_json_is_invalid_project_format() -> None:
    with pytest.raises(InvalidProjectFormat):
        decode_project("{not json")


def test_missing_targets_is_invalid_project_format() -> None:
    data = project(stage())
    del data["targets"]
    with pytest.raises(InvalidProjectFormat) as exc_info:
        _decode(data)
    assert "targets" in str(exc_info.value)


def test_wrong_block_shape_reports_its_path() -> None:
    data = project(stage(blocks={"a": {"opcode": 5, "topLevel": True}}))
    with pytest.raises(InvalidProjectFormat) as exc_info:
        _decode(data)
    assert "targets[0]" in str(exc_info.value)


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("left-right", RotationStyle.LEFT_RIGHT),
        ("don't rotate", RotationStyle.DONT_ROTATE),
        ("all around", RotationStyle.ALL_AROUND),
        ("sideways", RotationStyle.ALL_AROUND),
        (None, RotationStyle.ALL_AROUND),
    ],
)
def test_rotation_style_falls_back_to_all_around(tag, expected) -> None:
    sprite = target("Cat")
    if tag is not None:
        sprite["rotationStyle"] = tag
    raw = _decode(project(stage(), sprite))
    assert raw.targets[1].rotation_style is expected


def test_costume_data_format_is_closed() -> None:
    sprite = target("Cat")
    sprite["costumes"][0]["dataFormat"] = "jpg"
    with pytest.raises(InvalidProjectFormat) as exc_info:
        _decode(project(stage(), sprite))
    assert "jpg" in str(exc_info.value)


def test_variables_lists_and_broadcasts_are_decoded() -> None:
    raw = _decode(project(stage(
        variables={"v1": ["my variable", 0]},
        lists={"S1": ["scores", []]},
        broadcasts={"b1": "message1"},
    )))
    st = raw.targets[0]
    assert st.variables["v1"] == RawVariable("my variable", 0.0)
    assert st.lists["S1"].name == "scores"
    assert st.lists["S1"].items == ()
    assert st.broadcasts == {"b1": "message1"}
    assert st.variables_by_name()["my variable"][0] == "v1"
    assert st.lists_by_name()["scores"][0] == "S1"


def test_bad_variable_shape_is_invalid_project_format() -> None:
    with pytest.raises(InvalidProjectFormat):
        _decode(project(stage(variables={"v1": ["name"]})))


def test_top_level_reporters_are_kept_apart_from_blocks() -> None:
    raw = _decode(project(stage(
        variables={"v1": ["score", 0]},
        blocks={
            "r": [12, "score", "v1", 120, 40],
            "flag": block("event_whenflagclicked", top_level=True),
        },
    )))
    st = raw.targets[0]
    assert set(st.blocks) == {"flag"}
    assert st.top_level_reporters["r"] == VariablePayload("score", "v1", 120.0, 40.0)


def test_block_inputs_and_fields_are_decoded() -> None:
    raw = _decode(project(stage(blocks={
        "set": block(
            "data_setvariableto",
            inputs={"VALUE": [1, [10, "hi"]]},
            fields={"VARIABLE": ["score", "v1"]},
            top_level=True,
        ),
    })))
    decoded = raw.targets[0].blocks["set"]
    assert decoded.opcode == "data_setvariableto"
    assert decoded.top_level
    assert decoded.inputs["VALUE"].effective == LiteralPayload(10, "hi")
    assert decoded.fields["VARIABLE"] == RawField("score", "v1")


def test_malformed_input_inside_project_is_invalid_input_format() -> None:
    with pytest.raises(InvalidInputFormat):
        _decode(project(stage(blocks={
            "m": block("motion_movesteps", inputs={"STEPS": [1, [42, "?"]]}),
        })))
