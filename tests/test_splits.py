"""Tests for per-item assignment bookkeeping and labels."""

from app.splits import EVERYONE, Person, SplitAssignments

ALICE = Person("a", "Alice", "@alice")
BOB = Person("b", "Bob", "@bob")
CARA = Person("c", "Cara", "@cara")
PEOPLE = [ALICE, BOB, CARA]


def test_unassigned_item_targets_everyone() -> None:
    store = SplitAssignments(PEOPLE)
    assert store.assignees("burger") == []
    assert store.targets("burger") == ["a", "b", "c"]
    assert store.describe("burger") == EVERYONE


def test_toggle_adds_and_removes() -> None:
    store = SplitAssignments(PEOPLE)
    store.toggle("burger", "b")
    assert store.targets("burger") == ["b"]
    store.toggle("burger", "b")
    assert store.assignees("burger") == []
    assert store.targets("burger") == ["a", "b", "c"]


def test_toggle_twice_restores_original_state() -> None:
    store = SplitAssignments(PEOPLE, {"burger": ["a", "c"]})
    before = set(store.assignees("burger"))
    for person in ("a", "b"):
        store.toggle("burger", person)
        store.toggle("burger", person)
        assert set(store.assignees("burger")) == before


def test_set_everyone_clears_explicit_set() -> None:
    store = SplitAssignments(PEOPLE, {"burger": ["a"]})
    store.set_everyone("burger")
    assert store.describe("burger") == EVERYONE
    store.set_everyone("never-assigned")
    assert store.as_dict() == {}


def test_describe_uses_assignment_order() -> None:
    store = SplitAssignments(PEOPLE)
    store.toggle("burger", "c")
    assert store.describe("burger") == "Cara"
    store.toggle("burger", "a")
    assert store.describe("burger") == "Cara +1"
    store.toggle("burger", "b")
    assert store.describe("burger") == "Cara +2"


def test_empty_initial_sets_are_dropped() -> None:
    store = SplitAssignments(PEOPLE, {"burger": [], "fries": ["b"]})
    assert store.as_dict() == {"fries": ["b"]}


def test_no_people_means_no_targets() -> None:
    store = SplitAssignments([])
    assert store.targets("burger") == []
    assert store.describe("burger") == EVERYONE
