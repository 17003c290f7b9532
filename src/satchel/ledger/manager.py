"""Inventory ledger enforcing quantity and meta arithmetic rules.

This module provides the InventoryLedger class, a facade over a single Document
that holds a player's inventory. Every item is a document node named after the
item, with its quantity in the "value" field and any number of additional meta
fields (rarity, attack power, price...).

The ledger guarantees that:
- items are created lazily by add_items() and never duplicated
- quantities never go negative; an item whose quantity reaches exactly zero is
  removed from the document
- adding and subtracting are separate operations, and a non-positive quantity
  passed to any mutating operation is rejected without touching the document
- every mutating operation either fully applies or changes nothing

Caller mistakes and policy rejections are reported through return values
(None, False or a RemoveResult) and logged, never raised. Programming errors do
raise, always before any mutation: arithmetic that would overflow a signed
64-bit value, meta values that are not scalars, and use of a retired ledger.

Example usage:
    ledger = InventoryLedger()

    ledger.add_items("sword", 1, meta={"ATT": 10, "rarity": "rare"})
    ledger.meta_math_add("sword", "ATT", 5)  # 15

    if ledger.remove_items("potion", 1) is RemoveResult.REJECTED:
        show_message("Not enough potions")

    if ledger.has_exactly("sword", 1):
        equip("sword")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from satchel.document import DEFAULT_FIELD, Document, DocumentNode, DocumentParseError, is_reserved
from satchel.events import ItemsAddedEvent, ItemsRemovedEvent
from satchel.ledger.base import (
    ALLOW_NEGATIVE_VALUES,
    LONG_MAX,
    InventoryLedgerBase,
    RemoveResult,
    StaleLedgerError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from satchel.document import Scalar
    from satchel.events import EventBus

logger = logging.getLogger(__name__)


def _meta_updates(fields: Mapping[str, Scalar], *, skip: tuple[str, ...] = ()) -> dict[str, Scalar]:
    """Filter caller-supplied meta down to settable fields, validating every value first."""
    updates: dict[str, Scalar] = {}
    for field, value in fields.items():
        if field in skip or is_reserved(field):
            logger.debug("Skipping protected meta field %s", field)
            continue
        if not isinstance(value, str | int | float):
            msg = f"Meta field '{field}' must be a string or number, got {type(value).__name__}"
            raise TypeError(msg)
        updates[field] = value
    return updates


def _is_protected(field: str) -> bool:
    return field == DEFAULT_FIELD or is_reserved(field)


def _checked_sum(current: int, qty: int, what: str) -> int:
    result = current + qty
    if result > LONG_MAX:
        msg = f"Adding {qty} to {what} ({current}) overflows a 64-bit value"
        raise OverflowError(msg)
    return result


class InventoryLedger(InventoryLedgerBase):
    """A player's inventory: item quantities plus per-item meta fields.

    The ledger is the sole owner of its document for the lifetime of a session.
    It is not thread-safe; all calls are expected on one thread. When the session
    swaps in a different ledger it retires this one, after which every mutating
    call raises StaleLedgerError.

    Attributes:
        document: The backing document. Exposed for advanced reads; mutate it only
            through the ledger's operations.
        event_bus: Optional event bus receiving ItemsAddedEvent and ItemsRemovedEvent.
    """

    def __init__(self, document: Document | None = None, event_bus: EventBus | None = None) -> None:
        """Create a ledger.

        Args:
            document: Existing document to wrap. A new empty one is created if None.
            event_bus: Optional event bus for publishing quantity changes.
        """
        self.document = document if document is not None else Document()
        self.event_bus = event_bus
        self._retired = False

    def __len__(self) -> int:
        return len(self.document)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_item(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InventoryLedger):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"InventoryLedger(items={len(self)}, retired={self._retired})"

    @property
    def retired(self) -> bool:
        """Whether the session has replaced this ledger."""
        return self._retired

    def retire(self) -> None:
        """Mark this ledger as replaced. Mutating calls will raise from now on."""
        self._retired = True
        logger.debug("Retired ledger with %d items", len(self))

    def _ensure_current(self) -> None:
        if self._retired:
            msg = "This inventory ledger was replaced; fetch the current one from the session"
            raise StaleLedgerError(msg)

    # Item quantities

    def add_items(self, name: str, qty: int, meta: Mapping[str, Scalar] | None = None) -> int | None:
        """Add to an item's quantity, creating the item if needed.

        Meta entries are merged onto the item after the quantity update, overwriting
        fields with the same name. A "value" entry in meta is ignored because the
        quantity is only ever changed by add_items() and remove_items(); the reserved
        "id" field is ignored as well. The caller's mapping is never modified.

        Args:
            name: Item to add to the inventory (e.g., "gold", "Longsword").
            qty: Quantity to add. Must be greater than zero; use remove_items() to deplete.
            meta: Optional additional fields (e.g., {"ATT": 10, "rarity": "rare"}).

        Returns:
            The item's new quantity, or None if qty was not positive (nothing changed).

        Raises:
            OverflowError: If the new quantity would exceed a signed 64-bit value.
            TypeError: If a meta value is not a string or number. Nothing is changed.
        """
        self._ensure_current()
        if qty <= 0:
            logger.error("To deplete quantities, use remove_items (got qty=%d for %s)", qty, name)
            return None

        updates = _meta_updates(meta or {}, skip=(DEFAULT_FIELD,))
        item = self.document.get_first_node(name)
        total = _checked_sum(item.get_int() if item else 0, qty, f"'{name}' quantity")

        if item is None:
            item = self.document.add_node(name)
            logger.debug("Created inventory item: %s", name)
        item.set(DEFAULT_FIELD, total)
        for field, value in updates.items():
            item.set(field, value)

        logger.debug("Added %d %s (total %d)", qty, name, total)
        if self.event_bus:
            self.event_bus.publish(ItemsAddedEvent(name=name, qty=qty, total=total))
        return total

    def remove_items(self, name: str, qty: int) -> RemoveResult:
        """Subtract from an item's quantity.

        When the quantity reaches exactly zero the item is removed from the ledger,
        together with all of its meta fields.

        Args:
            name: Inventory item to subtract from.
            qty: How many to subtract. Must be greater than zero; use add_items() to add.

        Returns:
            RemoveResult.INVALID if qty was not positive or the item does not exist,
            RemoveResult.REJECTED if the item holds fewer than qty,
            RemoveResult.SUCCESS once the quantity was subtracted.
        """
        self._ensure_current()
        if qty <= 0:
            logger.error("To add quantities, use add_items (got qty=%d for %s)", qty, name)
            return RemoveResult.INVALID

        item = self.document.get_first_node(name)
        if item is None:
            logger.debug("Cannot remove %d %s: item not in inventory", qty, name)
            return RemoveResult.INVALID

        remaining = item.get_int() - qty
        if remaining < 0 and not ALLOW_NEGATIVE_VALUES:
            logger.debug("Cannot remove %d %s: only %d held", qty, name, item.get_int())
            return RemoveResult.REJECTED

        if remaining == 0 and not ALLOW_NEGATIVE_VALUES:
            self.document.remove_node(item.id)
            logger.debug("Removed last %d %s from inventory", qty, name)
        else:
            item.set(DEFAULT_FIELD, remaining)
            logger.debug("Removed %d %s (remaining %d)", qty, name, remaining)

        if self.event_bus:
            self.event_bus.publish(ItemsRemovedEvent(name=name, qty=qty, remaining=remaining))
        return RemoveResult.SUCCESS

    # Meta arithmetic

    def meta_math_add(self, item_name: str, meta_field: str, qty: int) -> int | None:
        """Add to the value of a meta field.

        An unset or non-numeric field counts as 0. The quantity field ("value") and the
        reserved "id" field cannot be used as meta_field.

        Args:
            item_name: Item that has the meta to update (e.g., "Longsword").
            meta_field: The meta field to update (e.g., "ATT").
            qty: Amount to add. Must be greater than zero; use meta_math_subtract() to lower.

        Returns:
            The field's new value, or None if qty was not positive or the item does not exist.

        Raises:
            OverflowError: If the result would exceed a signed 64-bit value.
        """
        self._ensure_current()
        if qty <= 0:
            logger.error("To deplete meta values, use meta_math_subtract (got qty=%d)", qty)
            return None
        if _is_protected(meta_field):
            logger.error("Meta arithmetic cannot touch the %s field", meta_field)
            return None

        item = self.document.get_first_node(item_name)
        if item is None:
            logger.error("Item not found: %s", item_name)
            return None

        result = _checked_sum(item.get_int(meta_field), qty, f"'{item_name}.{meta_field}'")
        item.set(meta_field, result)
        return result

    def meta_math_subtract(
        self, item_name: str, meta_field: str, qty: int, *, clamp_to_zero: bool = False
    ) -> int | None:
        """Subtract from the value of a meta field.

        Args:
            item_name: Item that has the meta to update (e.g., "Longsword").
            meta_field: The meta field to update (e.g., "durability").
            qty: Amount to subtract. Must be greater than zero; use meta_math_add() to raise.
            clamp_to_zero: If the result would be negative, store 0 instead of rejecting.

        Returns:
            The field's new value. None if qty was not positive, the item does not exist,
            or the result would be negative and clamp_to_zero is False.
        """
        self._ensure_current()
        if qty <= 0:
            logger.error("To increase meta values, use meta_math_add (got qty=%d)", qty)
            return None
        if _is_protected(meta_field):
            logger.error("Meta arithmetic cannot touch the %s field", meta_field)
            return None

        item = self.document.get_first_node(item_name)
        if item is None:
            logger.error("Item not found: %s", item_name)
            return None

        result = item.get_int(meta_field) - qty
        if result < 0 and not ALLOW_NEGATIVE_VALUES:
            if not clamp_to_zero:
                logger.error("Negative values are not allowed (%s.%s would be %d)", item_name, meta_field, result)
                return None
            result = 0

        item.set(meta_field, result)
        return result

    # Meta fields

    def set_meta_fields(self, item_name: str, fields: Mapping[str, Scalar]) -> bool:
        """Set or create several meta fields on an item.

        The reserved "id" field is skipped in any letter case, and the quantity field
        ("value") is skipped because only add_items() and remove_items() change it.
        Other field names are case-sensitive.

        Returns:
            False if the item does not exist, True otherwise (also when fields is empty).

        Raises:
            TypeError: If a value is not a string or number. Nothing is changed.
        """
        self._ensure_current()
        item = self.document.get_first_node(item_name)
        if item is None:
            logger.error("Item not found: %s", item_name)
            return False

        for field, value in _meta_updates(fields, skip=(DEFAULT_FIELD,)).items():
            item.set(field, value)
        return True

    def set_meta_field(self, item_name: str, field: str, value: Scalar) -> bool:
        """Set or create a single meta field on an item. See set_meta_fields()."""
        return self.set_meta_fields(item_name, {field: value})

    # Queries

    def get_item(self, name: str) -> DocumentNode | None:
        """Get an item's document node, or None if it is not in the inventory."""
        return self.document.get_first_node(name)

    def has_item(self, name: str) -> bool:
        """Check whether an item is in the inventory."""
        return self.document.get_first_node(name) is not None

    def quantity(self, name: str) -> int:
        """Get an item's quantity, 0 when the item is absent."""
        item = self.document.get_first_node(name)
        return item.get_int() if item else 0

    def get_meta(self, name: str, field: str, default: Scalar | None = None) -> Scalar | None:
        """Get the raw value of a meta field, or default if the item or field is missing."""
        item = self.document.get_first_node(name)
        if item is None:
            return default
        return item.get(field, default)

    def item_names(self) -> list[str]:
        """Names of all items in insertion order."""
        return [node.name for node in self.document]

    def has_at_least(self, name: str, qty: int) -> bool:
        """Check whether the player holds MORE than qty of an item.

        Note the strict comparison: holding exactly qty returns False. An absent item
        only satisfies qty == 0.
        """
        item = self.document.get_first_node(name)
        if item is None:
            return qty == 0
        return item.get_int() > qty

    def does_not_have(self, name: str, qty: int) -> bool:
        """Check whether the player holds fewer than qty of an item (or none at all)."""
        item = self.document.get_first_node(name)
        if item is None:
            return True
        return item.get_int() < qty

    def has_exactly(self, name: str, qty: int) -> bool:
        """Check whether the player holds exactly qty of an item. Absent counts as 0."""
        item = self.document.get_first_node(name)
        if item is None:
            return qty == 0
        return item.get_int() == qty

    # Serialization

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Snapshot of the inventory: item name to a copy of its fields."""
        return {node.name: node.fields() for node in self.document}

    def serialize(self) -> str:
        """Serialize the whole ledger to a string. See parse()."""
        return self.document.to_string()

    @classmethod
    def parse(cls, text: str, event_bus: EventBus | None = None) -> InventoryLedger:
        """Build a ledger from a string produced by serialize().

        Every item must appear once and hold a positive integer quantity within the
        signed 64-bit range.

        Raises:
            DocumentParseError: If the text is not a serialized document, or an item
                breaks the ledger's quantity rules.
        """
        document = Document.from_string(text)
        seen: set[str] = set()
        for node in document:
            if node.name in seen:
                msg = f"Duplicate item '{node.name}'"
                raise DocumentParseError(msg)
            seen.add(node.name)
            value = node.get(DEFAULT_FIELD)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 < value <= LONG_MAX:
                msg = f"Item '{node.name}' has invalid quantity {value!r}"
                raise DocumentParseError(msg)
        return cls(document, event_bus=event_bus)
