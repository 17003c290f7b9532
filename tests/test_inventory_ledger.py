"""Unit tests for InventoryLedger."""

import json
import unittest
from unittest.mock import MagicMock

from satchel.document import DocumentParseError
from satchel.events import ItemsAddedEvent, ItemsRemovedEvent
from satchel.ledger import LONG_MAX, InventoryLedger, RemoveResult, StaleLedgerError


class TestAddItems(unittest.TestCase):
    """Test InventoryLedger.add_items()."""

    def setUp(self) -> None:
        """Create an empty ledger."""
        self.ledger = InventoryLedger()

    def test_creates_missing_item(self) -> None:
        """Test that adding to an unknown item creates it."""
        result = self.ledger.add_items("gold", 10)

        assert result == 10
        assert self.ledger.has_item("gold")
        assert self.ledger.quantity("gold") == 10

    def test_adds_to_existing_quantity(self) -> None:
        """Test that a second add accumulates on the same item."""
        self.ledger.add_items("gold", 10)
        result = self.ledger.add_items("gold", 5)

        assert result == 15
        assert self.ledger.quantity("gold") == 15
        assert len(self.ledger) == 1

    def test_zero_quantity_is_rejected(self) -> None:
        """Test that qty == 0 changes nothing and returns None."""
        assert self.ledger.add_items("gold", 0) is None
        assert not self.ledger.has_item("gold")

    def test_negative_quantity_is_rejected(self) -> None:
        """Test that a negative qty does not deplete an existing item."""
        self.ledger.add_items("gold", 10)

        assert self.ledger.add_items("gold", -1) is None
        assert self.ledger.quantity("gold") == 10

    def test_meta_is_merged(self) -> None:
        """Test that meta fields are written onto the item."""
        self.ledger.add_items("sword", 1, meta={"ATT": 10, "rarity": "rare"})

        assert self.ledger.get_meta("sword", "ATT") == 10
        assert self.ledger.get_meta("sword", "rarity") == "rare"

    def test_meta_overwrites_existing_fields(self) -> None:
        """Test that later meta replaces same-named fields."""
        self.ledger.add_items("sword", 1, meta={"rarity": "common"})
        self.ledger.add_items("sword", 1, meta={"rarity": "rare"})

        assert self.ledger.get_meta("sword", "rarity") == "rare"
        assert self.ledger.quantity("sword") == 2

    def test_meta_value_entry_is_ignored(self) -> None:
        """Test that a "value" entry in meta cannot overwrite the quantity."""
        self.ledger.add_items("arrow", 5, meta={"value": 999, "weight": 1})

        assert self.ledger.quantity("arrow") == 5
        assert self.ledger.get_meta("arrow", "weight") == 1

    def test_meta_id_entry_is_ignored(self) -> None:
        """Test that the reserved id field is never written from meta."""
        self.ledger.add_items("arrow", 5, meta={"ID": "x"})

        assert self.ledger.get_meta("arrow", "ID") is None

    def test_caller_meta_is_not_modified(self) -> None:
        """Test that add_items works on a copy of the caller's mapping."""
        meta = {"value": 3, "ATT": 1}
        self.ledger.add_items("sword", 1, meta=meta)

        assert meta == {"value": 3, "ATT": 1}

    def test_invalid_meta_value_changes_nothing(self) -> None:
        """Test that a non-scalar meta value raises before any mutation."""
        with self.assertRaises(TypeError):
            self.ledger.add_items("sword", 1, meta={"tags": ["sharp"]})

        assert not self.ledger.has_item("sword")

    def test_overflow_fails_fast(self) -> None:
        """Test that exceeding a 64-bit quantity raises and leaves the quantity alone."""
        self.ledger.add_items("gold", LONG_MAX)

        with self.assertRaises(OverflowError):
            self.ledger.add_items("gold", 1)

        assert self.ledger.quantity("gold") == LONG_MAX

    def test_publishes_event(self) -> None:
        """Test that a successful add publishes ItemsAddedEvent."""
        event_bus = MagicMock()
        ledger = InventoryLedger(event_bus=event_bus)

        ledger.add_items("gold", 3)
        ledger.add_items("gold", 4)

        published_event = event_bus.publish.call_args[0][0]
        assert isinstance(published_event, ItemsAddedEvent)
        assert published_event.name == "gold"
        assert published_event.qty == 4
        assert published_event.total == 7

    def test_rejected_add_publishes_nothing(self) -> None:
        """Test that an invalid add does not publish."""
        event_bus = MagicMock()
        ledger = InventoryLedger(event_bus=event_bus)

        ledger.add_items("gold", 0)

        event_bus.publish.assert_not_called()


class TestRemoveItems(unittest.TestCase):
    """Test InventoryLedger.remove_items()."""

    def setUp(self) -> None:
        """Create a ledger holding 10 gold."""
        self.ledger = InventoryLedger()
        self.ledger.add_items("gold", 10, meta={"shiny": "yes"})

    def test_partial_removal(self) -> None:
        """Test that removing part of a stack updates the quantity."""
        result = self.ledger.remove_items("gold", 4)

        assert result is RemoveResult.SUCCESS
        assert self.ledger.quantity("gold") == 6

    def test_removing_everything_deletes_item(self) -> None:
        """Test that reaching exactly zero removes the item and its meta."""
        result = self.ledger.remove_items("gold", 10)

        assert result is RemoveResult.SUCCESS
        assert not self.ledger.has_item("gold")
        assert self.ledger.quantity("gold") == 0
        assert self.ledger.get_meta("gold", "shiny") is None
        assert self.ledger.has_exactly("gold", 0)

    def test_removing_too_many_is_rejected(self) -> None:
        """Test that over-removal is a policy rejection with no mutation."""
        result = self.ledger.remove_items("gold", 11)

        assert result is RemoveResult.REJECTED
        assert self.ledger.quantity("gold") == 10

    def test_missing_item_is_invalid(self) -> None:
        """Test that removing an unknown item is invalid, not rejected."""
        result = self.ledger.remove_items("nonexistent", 5)

        assert result is RemoveResult.INVALID
        assert not self.ledger.has_item("nonexistent")

    def test_non_positive_quantity_is_invalid(self) -> None:
        """Test that qty <= 0 is invalid and changes nothing."""
        assert self.ledger.remove_items("gold", 0) is RemoveResult.INVALID
        assert self.ledger.remove_items("gold", -3) is RemoveResult.INVALID
        assert self.ledger.quantity("gold") == 10

    def test_result_truthiness(self) -> None:
        """Test that only SUCCESS is truthy."""
        assert RemoveResult.SUCCESS
        assert not RemoveResult.REJECTED
        assert not RemoveResult.INVALID

    def test_readding_after_removal_starts_fresh(self) -> None:
        """Test that an item removed at zero comes back without its old meta."""
        self.ledger.remove_items("gold", 10)
        self.ledger.add_items("gold", 2)

        assert self.ledger.quantity("gold") == 2
        assert self.ledger.get_meta("gold", "shiny") is None

    def test_publishes_event(self) -> None:
        """Test that a successful removal publishes ItemsRemovedEvent."""
        event_bus = MagicMock()
        self.ledger.event_bus = event_bus

        self.ledger.remove_items("gold", 10)

        published_event = event_bus.publish.call_args[0][0]
        assert isinstance(published_event, ItemsRemovedEvent)
        assert published_event.qty == 10
        assert published_event.remaining == 0

    def test_rejected_removal_publishes_nothing(self) -> None:
        """Test that a rejected removal does not publish."""
        event_bus = MagicMock()
        self.ledger.event_bus = event_bus

        self.ledger.remove_items("gold", 50)

        event_bus.publish.assert_not_called()


class TestMetaMath(unittest.TestCase):
    """Test meta_math_add() and meta_math_subtract()."""

    def setUp(self) -> None:
        """Create a ledger holding a sword with ATT 10."""
        self.ledger = InventoryLedger()
        self.ledger.add_items("sword", 3, meta={"ATT": 10})

    def test_add_returns_new_value(self) -> None:
        """Test that adding to a meta field returns and stores the sum."""
        assert self.ledger.meta_math_add("sword", "ATT", 5) == 15
        assert self.ledger.get_meta("sword", "ATT") == 15

    def test_add_to_unset_field_starts_at_zero(self) -> None:
        """Test that an unset meta field counts as 0."""
        assert self.ledger.meta_math_add("sword", "DEF", 4) == 4

    def test_non_finite_field_counts_as_zero(self) -> None:
        """Test that meta arithmetic treats an infinite float field as 0."""
        self.ledger.set_meta_field("sword", "SPD", float("inf"))

        assert self.ledger.meta_math_subtract("sword", "SPD", 1) is None
        assert self.ledger.meta_math_subtract("sword", "SPD", 1, clamp_to_zero=True) == 0
        assert self.ledger.meta_math_add("sword", "SPD", 2) == 2

    def test_add_to_numeric_string_field(self) -> None:
        """Test that a numeric string field is read as a number."""
        self.ledger.set_meta_field("sword", "level", "7")

        assert self.ledger.meta_math_add("sword", "level", 1) == 8

    def test_add_rejects_non_positive_quantity(self) -> None:
        """Test that meta_math_add with qty <= 0 returns None and changes nothing."""
        assert self.ledger.meta_math_add("sword", "ATT", 0) is None
        assert self.ledger.meta_math_add("sword", "ATT", -5) is None
        assert self.ledger.get_meta("sword", "ATT") == 10

    def test_add_on_missing_item(self) -> None:
        """Test that meta_math_add on an unknown item returns None without creating it."""
        assert self.ledger.meta_math_add("shield", "DEF", 5) is None
        assert not self.ledger.has_item("shield")

    def test_add_cannot_touch_quantity(self) -> None:
        """Test that meta arithmetic refuses the value field."""
        assert self.ledger.meta_math_add("sword", "value", 5) is None
        assert self.ledger.quantity("sword") == 3

    def test_add_overflow_fails_fast(self) -> None:
        """Test that a meta sum beyond 64 bits raises and keeps the old value."""
        self.ledger.set_meta_field("sword", "xp", LONG_MAX)

        with self.assertRaises(OverflowError):
            self.ledger.meta_math_add("sword", "xp", 1)

        assert self.ledger.get_meta("sword", "xp") == LONG_MAX

    def test_subtract_returns_new_value(self) -> None:
        """Test that subtracting within bounds stores the difference."""
        assert self.ledger.meta_math_subtract("sword", "ATT", 4) == 6
        assert self.ledger.get_meta("sword", "ATT") == 6

    def test_subtract_to_exactly_zero(self) -> None:
        """Test that a meta field may reach zero and stays on the item."""
        assert self.ledger.meta_math_subtract("sword", "ATT", 10) == 0
        assert self.ledger.get_meta("sword", "ATT") == 0
        assert self.ledger.has_item("sword")

    def test_subtract_below_zero_is_rejected(self) -> None:
        """Test that going negative without clamping returns None and changes nothing."""
        self.ledger.meta_math_add("sword", "ATT", 5)

        assert self.ledger.meta_math_subtract("sword", "ATT", 20) is None
        assert self.ledger.get_meta("sword", "ATT") == 15

    def test_subtract_below_zero_clamps(self) -> None:
        """Test that clamp_to_zero stores and returns 0."""
        self.ledger.meta_math_add("sword", "ATT", 5)

        assert self.ledger.meta_math_subtract("sword", "ATT", 20, clamp_to_zero=True) == 0
        assert self.ledger.get_meta("sword", "ATT") == 0

    def test_subtract_rejects_non_positive_quantity(self) -> None:
        """Test that meta_math_subtract with qty <= 0 returns None."""
        assert self.ledger.meta_math_subtract("sword", "ATT", 0) is None
        assert self.ledger.meta_math_subtract("sword", "ATT", -2, clamp_to_zero=True) is None
        assert self.ledger.get_meta("sword", "ATT") == 10

    def test_subtract_on_missing_item(self) -> None:
        """Test that meta_math_subtract on an unknown item returns None."""
        assert self.ledger.meta_math_subtract("shield", "DEF", 1, clamp_to_zero=True) is None
        assert not self.ledger.has_item("shield")

    def test_subtract_cannot_touch_quantity(self) -> None:
        """Test that meta arithmetic cannot leave a zero-quantity item behind."""
        assert self.ledger.meta_math_subtract("sword", "value", 3) is None
        assert self.ledger.quantity("sword") == 3


class TestSetMetaFields(unittest.TestCase):
    """Test set_meta_fields() and set_meta_field()."""

    def setUp(self) -> None:
        """Create a ledger holding a sword."""
        self.ledger = InventoryLedger()
        self.ledger.add_items("sword", 1)

    def test_id_is_skipped(self) -> None:
        """Test that the id entry is ignored and the rest is set."""
        assert self.ledger.set_meta_fields("sword", {"id": "x", "rarity": "rare"}) is True

        item = self.ledger.get_item("sword")
        assert item is not None
        assert item.fields() == {"value": 1, "rarity": "rare"}

    def test_id_is_skipped_in_any_case(self) -> None:
        """Test that "Id" and "ID" are reserved too."""
        self.ledger.set_meta_fields("sword", {"Id": "x", "ID": "y"})

        assert self.ledger.get_meta("sword", "Id") is None
        assert self.ledger.get_meta("sword", "ID") is None

    def test_other_field_names_are_case_sensitive(self) -> None:
        """Test that field names other than id keep their case."""
        self.ledger.set_meta_fields("sword", {"ATT": 1, "att": 2})

        assert self.ledger.get_meta("sword", "ATT") == 1
        assert self.ledger.get_meta("sword", "att") == 2

    def test_quantity_cannot_be_overwritten(self) -> None:
        """Test that the value field is only changed by quantity operations."""
        with self.assertLogs("satchel.ledger.manager", level="DEBUG") as logs:
            self.ledger.set_meta_fields("sword", {"value": -5})

        assert self.ledger.quantity("sword") == 1
        assert any("value" in line for line in logs.output)

    def test_missing_item_returns_false(self) -> None:
        """Test that setting meta on an unknown item fails without creating it."""
        assert self.ledger.set_meta_fields("shield", {"rarity": "rare"}) is False
        assert not self.ledger.has_item("shield")

    def test_empty_fields_returns_true(self) -> None:
        """Test that an empty mapping on an existing item succeeds."""
        assert self.ledger.set_meta_fields("sword", {}) is True

    def test_invalid_value_sets_nothing(self) -> None:
        """Test that one bad value prevents every field from being set."""
        with self.assertRaises(TypeError):
            self.ledger.set_meta_fields("sword", {"rarity": "rare", "tags": {"a": 1}})

        assert self.ledger.get_meta("sword", "rarity") is None

    def test_set_meta_field_delegates(self) -> None:
        """Test the single-field convenience wrapper."""
        assert self.ledger.set_meta_field("sword", "price", "120") is True
        assert self.ledger.get_meta("sword", "price") == "120"
        assert self.ledger.set_meta_field("shield", "price", "80") is False
        assert self.ledger.set_meta_field("sword", "id", "x") is True
        assert self.ledger.get_meta("sword", "id") is None


class TestQueries(unittest.TestCase):
    """Test the quantity predicates."""

    def setUp(self) -> None:
        """Create a ledger holding 10 gold."""
        self.ledger = InventoryLedger()
        self.ledger.add_items("gold", 10)

    def test_has_at_least_is_strictly_greater(self) -> None:
        """Test that has_at_least compares with > (holding exactly qty is not enough)."""
        assert self.ledger.has_at_least("gold", 10) is False
        assert self.ledger.has_at_least("gold", 9) is True

        self.ledger.add_items("gold", 1)

        assert self.ledger.has_at_least("gold", 10) is True

    def test_has_at_least_absent_item(self) -> None:
        """Test that an absent item only satisfies qty == 0."""
        assert self.ledger.has_at_least("silver", 0) is True
        assert self.ledger.has_at_least("silver", 1) is False

    def test_does_not_have(self) -> None:
        """Test does_not_have for held and absent items."""
        assert self.ledger.does_not_have("gold", 11) is True
        assert self.ledger.does_not_have("gold", 10) is False
        assert self.ledger.does_not_have("silver", 0) is True
        assert self.ledger.does_not_have("silver", 5) is True

    def test_has_exactly(self) -> None:
        """Test has_exactly for held and absent items."""
        assert self.ledger.has_exactly("gold", 10) is True
        assert self.ledger.has_exactly("gold", 9) is False
        assert self.ledger.has_exactly("silver", 0) is True
        assert self.ledger.has_exactly("silver", 1) is False

    def test_item_names_and_contains(self) -> None:
        """Test item listing helpers."""
        self.ledger.add_items("sword", 1)

        assert self.ledger.item_names() == ["gold", "sword"]
        assert "sword" in self.ledger
        assert "shield" not in self.ledger

    def test_lookup_is_case_sensitive(self) -> None:
        """Test that item names differing in case are different items."""
        self.ledger.add_items("Gold", 1)

        assert self.ledger.quantity("gold") == 10
        assert self.ledger.quantity("Gold") == 1


class TestSerialization(unittest.TestCase):
    """Test serialize() and parse()."""

    def test_round_trip_preserves_items_and_meta(self) -> None:
        """Test that parse(serialize()) is observably equal to the original."""
        ledger = InventoryLedger()
        ledger.add_items("gold", 250)
        ledger.add_items("sword", 1, meta={"ATT": 15, "rarity": "rare", "weight": 3.5})
        ledger.add_items("potion", 4, meta={"heal": "25"})
        ledger.remove_items("potion", 1)

        restored = InventoryLedger.parse(ledger.serialize())

        assert restored == ledger
        assert restored.quantity("potion") == 3
        assert restored.get_meta("sword", "rarity") == "rare"
        assert restored.item_names() == ["gold", "sword", "potion"]

    def test_parsed_ledger_keeps_working(self) -> None:
        """Test that new items added after a parse do not collide with restored ones."""
        ledger = InventoryLedger()
        ledger.add_items("gold", 1)
        ledger.add_items("sword", 1)
        ledger.remove_items("gold", 1)

        restored = InventoryLedger.parse(ledger.serialize())
        restored.add_items("shield", 2)
        restored.remove_items("sword", 1)

        assert restored.to_dict() == {"shield": {"value": 2}}

    def test_empty_round_trip(self) -> None:
        """Test that an empty ledger survives serialization."""
        restored = InventoryLedger.parse(InventoryLedger().serialize())

        assert len(restored) == 0

    def test_parse_rejects_garbage(self) -> None:
        """Test that parsing non-ledger text raises DocumentParseError."""
        with self.assertRaises(DocumentParseError):
            InventoryLedger.parse("not a ledger")

    def test_parse_rejects_bad_quantities(self) -> None:
        """Test that items with a zero, negative, non-integer or missing quantity are refused."""
        for fields in ({"value": 0}, {"value": -3}, {"value": "7"}, {"value": 1.5}, {"value": True}, {"ATT": 4}):
            text = json.dumps({"version": 1, "nodes": [{"id": 0, "name": "sword", "fields": fields}]})
            with self.subTest(fields=fields), self.assertRaises(DocumentParseError):
                InventoryLedger.parse(text)

    def test_parse_rejects_quantity_past_long_max(self) -> None:
        """Test that a quantity beyond the 64-bit range is refused."""
        text = json.dumps({"version": 1, "nodes": [{"id": 0, "name": "gold", "fields": {"value": LONG_MAX + 1}}]})

        with self.assertRaises(DocumentParseError):
            InventoryLedger.parse(text)

    def test_parse_rejects_duplicate_item_names(self) -> None:
        """Test that two nodes for the same item are refused."""
        nodes = [
            {"id": 0, "name": "gold", "fields": {"value": 1}},
            {"id": 1, "name": "gold", "fields": {"value": 2}},
        ]

        with self.assertRaises(DocumentParseError):
            InventoryLedger.parse(json.dumps({"version": 1, "nodes": nodes}))


class TestRetiredLedger(unittest.TestCase):
    """Test behavior of a ledger after the session replaced it."""

    def test_mutations_raise_after_retire(self) -> None:
        """Test that every mutating call raises StaleLedgerError once retired."""
        ledger = InventoryLedger()
        ledger.add_items("sword", 1)
        ledger.retire()

        assert ledger.retired is True
        with self.assertRaises(StaleLedgerError):
            ledger.add_items("gold", 1)
        with self.assertRaises(StaleLedgerError):
            ledger.remove_items("sword", 1)
        with self.assertRaises(StaleLedgerError):
            ledger.meta_math_add("sword", "ATT", 1)
        with self.assertRaises(StaleLedgerError):
            ledger.meta_math_subtract("sword", "ATT", 1)
        with self.assertRaises(StaleLedgerError):
            ledger.set_meta_field("sword", "rarity", "rare")

    def test_reads_still_work_after_retire(self) -> None:
        """Test that queries on a retired ledger still answer."""
        ledger = InventoryLedger()
        ledger.add_items("sword", 2)
        ledger.retire()

        assert ledger.quantity("sword") == 2
        assert ledger.has_exactly("sword", 2)
