from tests.fakes import FakeNode, build_nodes
from treetable.paths import PathCodec
from treetable.reconcile import missing_ancestors

CODEC = PathCodec("/")


def test_missing_ancestors_of_deep_match():
    match = FakeNode("Y", "X", "R/X", "y", level=3)
    assert missing_ancestors([match], CODEC) == {"R", "X"}


def test_nothing_missing_when_ancestors_present():
    nodes = build_nodes([("R", None, "r", 1), ("X", "R", "x", 1), ("Y", "X", "y", 1)])
    assert missing_ancestors(nodes, CODEC) == set()


def test_roots_have_no_ancestors():
    nodes = build_nodes([("R", None, "r", 1), ("S", None, "s", 2)])
    assert missing_ancestors(nodes, CODEC) == set()


def test_shared_ancestors_are_listed_once():
    nodes = [
        FakeNode("Y", "X", "R/X", "y", level=3),
        FakeNode("Z", "X", "R/X", "z", level=3),
        FakeNode("W", "R", "R", "w", level=2),
    ]
    assert missing_ancestors(nodes, CODEC) == {"R", "X"}


def test_partially_present_ancestors():
    nodes = [
        FakeNode("X", "R", "R", "x", level=2),
        FakeNode("Q", "P", "R/X/P", "q", level=4),
    ]
    assert missing_ancestors(nodes, CODEC) == {"R", "P"}


def test_integer_ids_compare_as_strings():
    nodes = [FakeNode(1, None, "", "root"), FakeNode(3, 2, "1/2", "leaf", level=3)]
    assert missing_ancestors(nodes, CODEC) == {"2"}


def test_empty():
    assert missing_ancestors([], CODEC) == set()


def test_default_codec_uses_settings(settings):
    settings.TREETABLE = {"PATH_DELIMITER": ","}
    assert missing_ancestors([FakeNode("c", "b", "a,b", "c", level=3)]) == {"a", "b"}
