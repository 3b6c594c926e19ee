"""Per-item assignment of receipt items to the people sharing them."""

from dataclasses import dataclass

EVERYONE = "Everyone"


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    handle: str = ""


class SplitAssignments:
    """Item id -> ordered list of person ids sharing that item.

    An item with no entry (or an empty one) is split across every eligible person.
    The eligible people are fixed for the lifetime of the instance.
    """

    def __init__(self, people: list[Person], assignments: dict[str, list[str]] | None = None):
        self.people = list(people)
        self._names = {p.id: p.name for p in self.people}
        self._assignments: dict[str, list[str]] = {
            item_id: list(person_ids) for item_id, person_ids in (assignments or {}).items() if person_ids
        }

    def toggle(self, item_id: str, person_id: str) -> None:
        current = self._assignments.setdefault(item_id, [])
        if person_id in current:
            current.remove(person_id)
        else:
            current.append(person_id)
        if not current:
            del self._assignments[item_id]

    def set_everyone(self, item_id: str) -> None:
        self._assignments.pop(item_id, None)

    def assignees(self, item_id: str) -> list[str]:
        return list(self._assignments.get(item_id, []))

    def targets(self, item_id: str) -> list[str]:
        """People an item's cost is divided between."""
        explicit = self._assignments.get(item_id)
        if explicit:
            return list(explicit)
        return [p.id for p in self.people]

    def describe(self, item_id: str) -> str:
        explicit = self._assignments.get(item_id)
        if not explicit:
            return EVERYONE
        first = self._names.get(explicit[0], explicit[0])
        if len(explicit) == 1:
            return first
        return f"{first} +{len(explicit) - 1}"

    def as_dict(self) -> dict[str, list[str]]:
        return {item_id: list(ids) for item_id, ids in self._assignments.items()}
