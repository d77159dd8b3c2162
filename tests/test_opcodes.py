import pytest

from scratchast import opcodes
from scratchast.block_resolver import BlockResolver
from scratchast.blocks_to_text import format_expression, generate_block_code
from scratchast.decode import decode_target
from scratchast.nodes import BlockStack, Literal, Operation, ZERO_PLACEHOLDER
from scratchast.opcodes import OpSpec, lookup_operator, normalize_opcode, register_operator
from scratchast.values import force_bool, force_num, force_str
from tests._builders import block, diag, scopes, stage, target


@pytest.fixture
def isolated_registry(monkeypatch):
    monkeypatch.setattr(opcodes, "OPERATORS", dict(opcodes.OPERATORS))
    monkeypatch.setattr(opcodes, "KIND_SLOTS", dict(opcodes.KIND_SLOTS))


def test_lowercase_pen_opcodes_are_normalized() -> None:
    assert normalize_opcode("pen_pendown") == "pen_penDown"
    assert lookup_operator("pen_pendown") == lookup_operator("pen_penDown")
    assert lookup_operator("motion_movesteps").slots == ("STEPS",)


def test_substacks_are_always_optional() -> None:
    spec = lookup_operator("control_if_else")
    assert spec.substacks == ("SUBSTACK", "SUBSTACK2")
    assert {"CONDITION", "SUBSTACK", "SUBSTACK2"} <= spec.optional


def test_registered_opcode_is_resolved(isolated_registry) -> None:
    blocks = {
        "hat": block("event_whenflagclicked", next="x", top_level=True),
        "x": block("music_playDrumForBeats", parent="hat", inputs={"BEATS": [1, [4, 0.25]]},
                   fields={"DRUM": ["1", None]}),
    }
    sprite = target("Cat", blocks=blocks)
    _, _, scope = scopes(stage(), sprite)
    ctx = diag("Cat")

    before = BlockResolver(decode_target(sprite), scope, ctx).walk_chain("x")
    assert before == BlockStack((ZERO_PLACEHOLDER,))

    register_operator("music_playDrumForBeats", OpSpec("MusicPlayDrum", ("BEATS",), ("DRUM",)))
    after = BlockResolver(decode_target(sprite), scope, ctx).walk_chain("x")
    assert after == BlockStack((Operation("MusicPlayDrum", (Literal(0.25), Literal("1"))),))
    assert opcodes.KIND_SLOTS["MusicPlayDrum"] == ("BEATS", "DRUM")


@pytest.mark.parametrize(
    "value, expected",
    [(10.0, "10"), (0.5, "0.5"), (True, "true"), (False, "false"), ("hi", "hi"), (float("inf"), "inf")],
)
def test_force_str(value, expected) -> None:
    assert force_str(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, 2.5), (True, 1.0), (False, 0.0), ("12", 0.0), ("", 0.0)],
)
def test_force_num(value, expected) -> None:
    assert force_num(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), (False, False), ("", False), ("false", True), (0.0, False), (-1.0, True)],
)
def test_force_bool(value, expected) -> None:
    assert force_bool(value) is expected


def test_text_dump_of_nested_stacks() -> None:
    op = Operation("ControlIfElse", (
        Literal(False),
        BlockStack((Operation("PenClear"),)),
        BlockStack((Operation("MotionMove", (Literal(10.0),)),)),
    ))
    assert generate_block_code(op) == (
        "ControlIfElse CONDITION=(false)\n"
        "    PenClear\n"
        "else\n"
        "    MotionMove STEPS=(10)\n"
        "end\n"
    )
    assert format_expression(Literal("hi")) == "[hi]"
