"""Owed-total computation for a receipt split.

Shares are accumulated unrounded and each person's total is rounded once at the
end, so the rounded totals may drift from the item sum by up to half a cent per
person. That drift is reported as-is, never corrected.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Protocol

from app.splits import Person, SplitAssignments

CENT = Decimal("0.01")
MISMATCH_TOLERANCE = Decimal("0.01")


class PricedItem(Protocol):
    id: str
    price: Decimal | None


def _as_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def compute_owed_totals(
    items: Iterable[PricedItem],
    assignments: SplitAssignments,
    people: list[Person] | None = None,
) -> dict[str, Decimal]:
    """Return {person_id: amount owed}, rounded to cents half away from zero.

    ``people`` defaults to the eligible people the assignments were built with.
    Items without a positive price contribute nothing.
    """
    if people is None:
        people = assignments.people
    running: dict[str, Decimal] = {p.id: Decimal(0) for p in people}
    everyone = [p.id for p in people]

    for item in items:
        if item.price is None:
            continue
        price = _as_decimal(item.price)
        if price <= 0:
            continue

        targets = assignments.assignees(item.id) or everyone
        if not targets:
            continue

        share = price / len(targets)
        for person_id in targets:
            running[person_id] = running.get(person_id, Decimal(0)) + share

    return {person_id: total.quantize(CENT, rounding=ROUND_HALF_UP) for person_id, total in running.items()}


def items_sum(items: Iterable[PricedItem]) -> Decimal | None:
    """Sum of all known item prices, or None when no item has a price."""
    prices = [_as_decimal(item.price) for item in items if item.price is not None]
    if not prices:
        return None
    return sum(prices, Decimal(0))


def has_subtotal_mismatch(items: Iterable[PricedItem], subtotal) -> bool:
    """True when the item prices and the printed subtotal differ by more than a cent.

    Items without a price count as nothing, so a subtotal with no priced items
    is a mismatch.
    """
    if subtotal is None:
        return False
    total = items_sum(items) or Decimal(0)
    return abs(total - _as_decimal(subtotal)) > MISMATCH_TOLERANCE
