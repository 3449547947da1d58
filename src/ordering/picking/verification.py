"""Picker verification — reconcile physical item counts before an order is prepared.

A picker types the count of each item they collected. ``validate`` compares
those counts with the ordered quantities and collects every discrepancy at
once so the operator sees the whole list in one pass. An order may only move
to ``prepared`` when there are none.

``PickerWorkbench`` keeps the typed counts and the per-item checked flags in
the local store, keyed by order id and item index, so a picker's progress
survives an app restart.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import structlog

from ordering.order.order import OrderStatus
from shared.result import Err, Ok, Result
from shared.storage import LocalStore

logger = structlog.get_logger(__name__)

VERIFICATION_STORAGE_KEY = "picker_verification"

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class ItemDiscrepancy:
    """One item whose entered count differs from the ordered quantity."""

    item_index: int
    name: str
    ordered: int
    entered: int | None

    @property
    def delta(self) -> int:
        return (self.entered or 0) - self.ordered

    @property
    def message(self) -> str:
        if self.entered is None:
            return f"invalid count for {self.name}"
        if self.delta < 0:
            return f"needs {-self.delta} more of {self.name}"
        return f"{self.delta} too many of {self.name}"


def parse_count(value) -> int:
    """Turn an operator entry into a count.

    Integers pass through. Text is read up to the first non-digit, and text
    without a leading number counts as 0. Negative counts are rejected.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError("Count must be a number")
    if isinstance(value, int):
        count = value
    else:
        match = _LEADING_INTEGER.match(str(value))
        count = int(match.group(1)) if match else 0
    if count < 0:
        raise ValueError(f"Count cannot be negative: {value!r}")
    return count


def _line_items(order_or_items) -> list:
    if hasattr(order_or_items, "line_items"):
        return order_or_items.line_items()
    return list(order_or_items)


def _entered(entered_counts: Mapping, index: int) -> int | None:
    value = entered_counts[index] if index in entered_counts else entered_counts.get(str(index), 0)
    try:
        return parse_count(value)
    except ValueError:
        return None


def validate(order_or_items, entered_counts: Mapping) -> Result[None, list[ItemDiscrepancy]]:
    """Compare entered counts with ordered quantities; a missing entry counts as 0.

    A count that cannot be accepted (negative, or a boolean) is reported as
    a discrepancy with ``entered=None`` rather than raised.
    """
    discrepancies = []
    for index, item in enumerate(_line_items(order_or_items)):
        entered = _entered(entered_counts, index)
        if entered != item.quantity:
            discrepancies.append(
                ItemDiscrepancy(item_index=index, name=item.name, ordered=item.quantity, entered=entered)
            )

    if discrepancies:
        return Err(discrepancies)
    return Ok(None)


class PickerWorkbench:
    """Persisted per-order verification state for a picker session."""

    def __init__(self, storage: LocalStore):
        self.storage = storage

    def _load(self) -> dict:
        return self.storage.get(VERIFICATION_STORAGE_KEY, {}) or {}

    def _save(self, state: dict) -> None:
        if state:
            self.storage.set(VERIFICATION_STORAGE_KEY, state)
        else:
            self.storage.remove(VERIFICATION_STORAGE_KEY)

    def _entry(self, state: dict, order_id: str) -> dict:
        return state.setdefault(str(order_id), {"counts": {}, "checked": {}})

    # -------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------
    def open(self, order) -> None:
        """Start (or resume) verifying an order that is being prepared."""
        if order.status != OrderStatus.PREPARING.value:
            raise ValueError(f"Order {order.id} is {order.status}; only preparing orders can be verified")
        state = self._load()
        self._entry(state, order.id)
        self._save(state)

    def has_state(self, order_id: str) -> bool:
        return str(order_id) in self._load()

    def set_count(self, order_id: str, item_index: int, value) -> int:
        count = parse_count(value)
        state = self._load()
        self._entry(state, order_id)["counts"][str(item_index)] = count
        self._save(state)
        return count

    def toggle_checked(self, order_id: str, item_index: int) -> bool:
        state = self._load()
        checked = self._entry(state, order_id)["checked"]
        checked[str(item_index)] = not checked.get(str(item_index), False)
        self._save(state)
        return checked[str(item_index)]

    def counts(self, order_id: str) -> dict[int, int]:
        entry = self._load().get(str(order_id), {})
        return {int(index): count for index, count in entry.get("counts", {}).items()}

    def checked(self, order_id: str) -> dict[int, bool]:
        entry = self._load().get(str(order_id), {})
        return {int(index): flag for index, flag in entry.get("checked", {}).items()}

    def validate(self, order) -> Result[None, list[ItemDiscrepancy]]:
        return validate(order, self.counts(order.id))

    # -------------------------------------------------------------------
    # Cleanup
    # -------------------------------------------------------------------
    def clear(self, order_id: str) -> None:
        state = self._load()
        if state.pop(str(order_id), None) is not None:
            self._save(state)
            logger.debug("Picker verification cleared", order_id=str(order_id))

    def prune(self, active_order_ids: Iterable[str]) -> list[str]:
        """Drop state for orders that are no longer being prepared."""
        keep = {str(order_id) for order_id in active_order_ids}
        state = self._load()
        stale = [order_id for order_id in state if order_id not in keep]
        for order_id in stale:
            del state[order_id]
        if stale:
            self._save(state)
        return stale
