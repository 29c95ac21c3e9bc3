from collections.abc import Callable

import pytest

import girgen


def _chain_table(depth: int) -> dict[str, list[str]]:
    names = [f"Ns.C{i}" for i in range(depth)]
    return {child: [parent] for child, parent in zip(names[1:], names)}


@pytest.mark.parametrize("depth", [2, 3, 5, 8])
def test_flatten_chain_lists_every_ancestor(depth: int) -> None:
    table = _chain_table(depth)

    flat = girgen.flatten_inheritance(table)

    leaf = f"Ns.C{depth - 1}"
    assert len(flat[leaf]) == depth - 1
    assert flat[leaf] == [f"Ns.C{i}" for i in range(depth - 2, -1, -1)]
    assert "Ns.C0" not in flat


def test_flatten_extends_entries_in_place() -> None:
    table = {"A.Child": ["A.Parent"], "A.Parent": ["A.Root"]}

    flat = girgen.flatten_inheritance(table)

    assert flat is table
    assert table == {"A.Child": ["A.Parent", "A.Root"], "A.Parent": ["A.Root"]}


def test_flatten_result_does_not_depend_on_key_order() -> None:
    forward = {"A.C": ["A.B"], "A.B": ["A.A"], "A.A": ["A.Root"]}
    backward = dict(reversed(list(forward.items())))

    assert girgen.flatten_inheritance(forward) == girgen.flatten_inheritance(
        backward
    )
    assert forward["A.C"] == ["A.B", "A.A", "A.Root"]


def test_flatten_parent_outside_table_ends_chain() -> None:
    table = {"Ext.Leaf": ["Gone.Thing"]}

    assert girgen.flatten_inheritance(table) == {"Ext.Leaf": ["Gone.Thing"]}


def test_flatten_empty_parent_list_is_left_alone() -> None:
    table: dict[str, list[str]] = {"A.Orphan": [], "A.Child": ["A.Orphan"]}

    assert girgen.flatten_inheritance(table) == {
        "A.Orphan": [],
        "A.Child": ["A.Orphan"],
    }


def test_flatten_two_class_cycle_raises() -> None:
    table = {"A.X": ["A.Y"], "A.Y": ["A.X"]}

    with pytest.raises(girgen.GenerationError) as exc_info:
        girgen.flatten_inheritance(table)

    assert exc_info.value.code == "CYCLIC_INHERITANCE"
    assert exc_info.value.recoverable is False
    assert "A.X -> A.Y" in exc_info.value.message


def test_flatten_self_parent_raises() -> None:
    with pytest.raises(girgen.GenerationError) as exc_info:
        girgen.flatten_inheritance({"A.Self": ["A.Self"]})

    assert exc_info.value.code == "CYCLIC_INHERITANCE"


def test_flatten_cycle_reached_from_outside_raises() -> None:
    table = {"A.Entry": ["A.X"], "A.X": ["A.Y"], "A.Y": ["A.X"]}

    with pytest.raises(girgen.GenerationError):
        girgen.flatten_inheritance(table)


def test_build_inheritance_table_spans_modules(
    make_module: Callable[..., girgen.GirModule],
) -> None:
    base = make_module(
        "Base-1.0",
        classes=(
            girgen.GirClass("Root", "class"),
            girgen.GirClass("Mid", "class", parent="Root"),
            girgen.GirClass("Iface", "interface", parent="Root"),
        ),
    )
    ext = make_module(
        "Ext-1.0",
        ("Base-1.0",),
        classes=(girgen.GirClass("Leaf", "class", parent="Base.Mid"),),
    )
    registry = {base.full_name: base, ext.full_name: ext}

    table = girgen.flatten_inheritance(girgen.build_inheritance_table(registry))

    assert table == {
        "Base.Mid": ["Base.Root"],
        "Ext.Leaf": ["Base.Mid", "Base.Root"],
    }
