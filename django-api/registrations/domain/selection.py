"""In-memory bookkeeping for what one checkout intends to pay for."""

from collections.abc import Callable
from dataclasses import dataclass, field

from registrations.domain.errors import AlreadyPaidError, ValidationFailedError
from registrations.domain.fees import FeeSchedule
from registrations.domain.value_objects import EntityId, EventKey, NewEntity


@dataclass
class SelectionSet:
    """Entities selected for one checkout of one event.

    `paid_check` answers whether an entity is already paid for `event_key`.
    It is consulted on select so a paid entity is never charged twice, even
    when the UI failed to disable it.
    """

    event_key: EventKey
    tier: str
    paid_check: Callable[[EntityId], bool] | None = field(default=None, repr=False, compare=False)
    selected_entity_ids: list[EntityId] = field(default_factory=list)
    new_entities: list[NewEntity] = field(default_factory=list)

    def select(self, entity_id: EntityId) -> None:
        if entity_id in self.selected_entity_ids:
            return
        if self.paid_check is not None and self.paid_check(entity_id):
            raise AlreadyPaidError(str(entity_id), str(self.event_key))
        self.selected_entity_ids.append(entity_id)

    def deselect(self, entity_id: EntityId) -> None:
        if entity_id in self.selected_entity_ids:
            self.selected_entity_ids.remove(entity_id)

    def add_new(self, entity: NewEntity) -> None:
        self.new_entities.append(entity)

    def remove_new(self, index: int) -> NewEntity:
        if not 0 <= index < len(self.new_entities):
            raise ValidationFailedError(f"No new entity at position {index}")
        return self.new_entities.pop(index)

    def current_count(self) -> int:
        return len(self.selected_entity_ids) + len(self.new_entities)

    def is_empty(self) -> bool:
        return self.current_count() == 0

    def quote(self, fees: FeeSchedule) -> int:
        """Preview total for the current selection."""
        return fees.quote(self.event_key, self.tier, self.current_count())

    def fold_created(self, new_entity: NewEntity, entity_id: EntityId) -> None:
        """Replace a persisted new entity with its id so a retry cannot recreate it."""
        self.new_entities.remove(new_entity)
        if entity_id not in self.selected_entity_ids:
            self.selected_entity_ids.append(entity_id)
