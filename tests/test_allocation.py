"""Tests for owed-total computation and the subtotal consistency check."""

from dataclasses import dataclass
from decimal import Decimal

from app.allocation import compute_owed_totals, has_subtotal_mismatch, items_sum
from app.splits import Person, SplitAssignments

ALICE = Person("alice", "Alice")
BOB = Person("bob", "Bob")
CARA = Person("cara", "Cara")


@dataclass
class Item:
    id: str
    price: Decimal | None


def D(value: str) -> Decimal:
    return Decimal(value)


BURGER = Item("burger", D("10.00"))
FRIES = Item("fries", D("4.00"))


def test_default_assignment_splits_evenly() -> None:
    store = SplitAssignments([ALICE, BOB])
    assert compute_owed_totals([BURGER, FRIES], store) == {"alice": D("7.00"), "bob": D("7.00")}


def test_explicit_assignment_limits_targets() -> None:
    store = SplitAssignments([ALICE, BOB])
    store.toggle("burger", "alice")
    assert compute_owed_totals([BURGER, FRIES], store) == {"alice": D("12.00"), "bob": D("2.00")}


def test_null_and_non_positive_prices_are_skipped() -> None:
    store = SplitAssignments([ALICE, BOB])
    items = [Item("mystery", None), Item("free", D("0")), Item("refund", D("-3.00"))]
    assert compute_owed_totals(items, store) == {"alice": D("0.00"), "bob": D("0.00")}


def test_no_people_gives_empty_result() -> None:
    assert compute_owed_totals([BURGER, FRIES], SplitAssignments([])) == {}


def test_no_items_gives_all_zero() -> None:
    assert compute_owed_totals([], SplitAssignments([ALICE])) == {"alice": D("0.00")}


def test_rounds_once_per_person_half_away_from_zero() -> None:
    store = SplitAssignments([ALICE, BOB, CARA])
    # 10 / 3 = 3.333..., two such items -> 6.666... -> 6.67
    totals = compute_owed_totals([Item("a", D("10.00")), Item("b", D("10.00"))], store)
    assert totals == {"alice": D("6.67"), "bob": D("6.67"), "cara": D("6.67")}

    store = SplitAssignments([ALICE, BOB])
    assert compute_owed_totals([Item("c", D("0.05"))], store) == {"alice": D("0.03"), "bob": D("0.03")}


def test_rounding_drift_is_bounded_and_not_corrected() -> None:
    people = [ALICE, BOB, CARA]
    items = [Item("a", D("10.00")), Item("b", D("0.01")), Item("c", D("7.99"))]
    totals = compute_owed_totals(items, SplitAssignments(people))
    drift = abs(sum(totals.values()) - items_sum(items))
    assert drift <= D("0.01") * len(people)


def test_is_idempotent() -> None:
    store = SplitAssignments([ALICE, BOB, CARA], {"burger": ["bob", "cara"]})
    first = compute_owed_totals([BURGER, FRIES], store)
    second = compute_owed_totals([BURGER, FRIES], store)
    assert first == second
    assert store.as_dict() == {"burger": ["bob", "cara"]}


def test_explicit_assignee_outside_people_still_pays() -> None:
    store = SplitAssignments([ALICE], {"burger": ["bob"]})
    assert compute_owed_totals([BURGER], store) == {"alice": D("0.00"), "bob": D("10.00")}


def test_accepts_float_prices() -> None:
    store = SplitAssignments([ALICE, BOB])
    assert compute_owed_totals([Item("x", 3.0)], store) == {"alice": D("1.50"), "bob": D("1.50")}


def test_subtotal_mismatch_threshold() -> None:
    items = [BURGER, FRIES, Item("unknown", None)]
    assert has_subtotal_mismatch(items, D("14.00")) is False
    assert has_subtotal_mismatch(items, D("14.01")) is False
    assert has_subtotal_mismatch(items, D("13.99")) is False
    assert has_subtotal_mismatch(items, D("14.02")) is True
    assert has_subtotal_mismatch(items, D("12.00")) is True


def test_subtotal_mismatch_needs_a_subtotal() -> None:
    assert has_subtotal_mismatch([BURGER], None) is False
    assert has_subtotal_mismatch([], None) is False


def test_subtotal_without_priced_items_is_a_mismatch() -> None:
    assert has_subtotal_mismatch([Item("x", None)], D("14.00")) is True
    assert has_subtotal_mismatch([], D("14.00")) is True
    assert has_subtotal_mismatch([], D("0.01")) is False


def test_items_sum_excludes_nulls() -> None:
    assert items_sum([BURGER, Item("x", None), FRIES]) == D("14.00")
    assert items_sum([Item("x", None)]) is None
