"""Order store port (abstract interface).

Defines the contract the client-side components (lifecycle controller, order
feeds, working-hours monitor) use to talk to the authoritative order store.
``DomainOrderStore`` fulfils it in-process; tests swap in fakes that simulate
concurrent writers and network failures.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum


class StoreUnavailableError(Exception):
    """The store could not be reached. Callers surface this as a network error."""


class OrderPartition(Enum):
    PENDING = "pending"  # every status except delivered
    COMPLETED = "completed"  # delivered only


class OrderStorePort(ABC):
    """Abstract interface for the remote order store."""

    @abstractmethod
    async def get_order(self, order_id: str):
        """Return the order or None when it does not exist."""
        ...

    @abstractmethod
    async def update_order_status(
        self,
        order_id: str,
        new_status: str,
        actor_role: str,
        actor_id: str | None = None,
        expected_status: str | None = None,
    ) -> dict:
        """Run the atomic status procedure.

        Returns:
            {"success": True, "order": Order} on success, or
            {"success": False, "error": str, "conflict": bool} when refused.
        """
        ...

    @abstractmethod
    async def fetch_orders(self, partition: OrderPartition, page: int, page_size: int) -> list:
        """Return one page of the partition, newest first."""
        ...

    @abstractmethod
    async def get_working_hours_window(self):
        """Return the active ``WorkingHoursWindow``."""
        ...

    @abstractmethod
    def subscribe(self, callback: Callable[[dict], None]) -> Callable[[], None]:
        """Register for change notifications. Returns a disposer that unsubscribes."""
        ...
