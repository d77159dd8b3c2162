from concurrent.futures import ThreadPoolExecutor

import pytest

from scratchast.errors import UnresolvedReference
from scratchast.resources import Interner, ResourcePath
from scratchast.scope import build_scope
from scratchast.decode import decode_target
from tests._builders import block, scopes, stage, target


def test_interning_the_same_label_twice_gives_distinct_handles() -> None:
    interner = Interner()
    first = interner.intern("score")
    second = interner.intern("score")
    assert first != second
    assert interner.label(first) == interner.label(second) == "score"
    assert len(interner) == 2


def test_ids_start_at_one_and_increase() -> None:
    interner = Interner()
    paths = [interner.intern(name) for name in ("a", "b", "c")]
    assert [interner.id(p) for p in paths] == [1, 2, 3]


def test_equality_ignores_the_label() -> None:
    assert ResourcePath(7, "x") == ResourcePath(7, "y")
    assert hash(ResourcePath(7, "x")) == hash(ResourcePath(7, "y"))
    assert ResourcePath(7, "x") != ResourcePath(8, "x")


def test_rendering() -> None:
    path = ResourcePath(3, "my variable")
    assert str(path) == "my variable#3"
    assert path.js_name == "$3"
    assert str(ResourcePath(4)) == "#4"


def test_separate_interners_are_independent() -> None:
    assert Interner().intern("a").id == Interner().intern("b").id == 1


def test_concurrent_interning_never_repeats_an_id() -> None:
    interner = Interner()

    def intern_many(prefix: str):
        return [interner.intern(f"{prefix}{i}") for i in range(200)]

    with ThreadPoolExecutor(max_workers=8) as executor:
        batches = list(executor.map(intern_many, [f"t{n}-" for n in range(8)]))

    ids = [path.id for batch in batches for path in batch]
    assert len(ids) == len(set(ids)) == 1600
    assert len(interner) == 1600


def test_scope_declarations_share_handles_with_id_tables() -> None:
    interner, stage_scope, _ = scopes(stage(
        variables={"v1": ["score", 5]},
        lists={"S1": ["scores", ["1", "2"]]},
        broadcasts={"b1": "go"},
    ))
    path, value = stage_scope.variable_decls["score"]
    assert stage_scope.variables["v1"] == path
    assert value == 5.0
    list_path, items = stage_scope.list_decls["scores"]
    assert stage_scope.lists["S1"] == list_path
    assert items == ("1", "2")
    assert stage_scope.broadcast_names["go"] == stage_scope.broadcasts["b1"]
    assert len(interner) == 3


def test_scope_lookup_prefers_local_then_global() -> None:
    _, stage_scope, sprite_scope = scopes(
        stage(variables={"g": ["shared", 0]}),
        target("Cat", variables={"l": ["mine", 0], "g2": ["shared", 0]}),
    )
    assert sprite_scope.resolve_variable("mine", "l") == sprite_scope.variables["l"]
    assert sprite_scope.resolve_variable("shared", "g") == stage_scope.variables["g"]
    # Same name, different id: a local declaration is its own handle.
    assert sprite_scope.resolve_variable("shared", "g2") != stage_scope.variables["g"]


def test_scope_lookup_misses_raise_unresolved_reference() -> None:
    _, _, sprite_scope = scopes(stage(), target("Cat"))
    with pytest.raises(UnresolvedReference) as exc_info:
        sprite_scope.resolve_list("ghost", "nope")
    assert exc_info.value.name == "ghost"
    assert exc_info.value.target == "Cat"


def test_sibling_sprites_do_not_see_each_other() -> None:
    interner, stage_scope, cat = scopes(stage(), target("Cat", variables={"c": ["mine", 0]}))
    dog = build_scope(decode_target(target("Dog")), interner, parent=stage_scope)
    assert cat.resolve_variable("mine", "c")
    with pytest.raises(UnresolvedReference):
        dog.resolve_variable("mine", "c")


def test_definitions_are_interned_per_prototype() -> None:
    prototype = block(
        "procedures_prototype",
        shadow=True,
        mutation={"tagName": "mutation", "proccode": "jump %s", "argumentids": "[]"},
    )
    _, stage_scope, sprite_scope = scopes(stage(), target("Cat", blocks={"proto": prototype}))
    assert list(sprite_scope.definitions) == ["jump %s"]
    assert sprite_scope.definitions["jump %s"].label == "jump %s"
    assert stage_scope.definitions == {}
