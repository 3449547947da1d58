"""Paginated order feeds for the admin, picker and courier screens.

Orders are split into two partitions that page independently: ``pending``
(anything not yet delivered) and ``completed`` (delivered). Pages are merged
with id de-duplication, so loading a page twice, or a page that overlaps the
previous one because of concurrent writes, never duplicates an order.

A refresh always restarts from page 0 and invalidates any page load still in
flight; results of an invalidated load are dropped rather than merged.
"""

import asyncio

import structlog

from ordering.domain import custom_setting
from ordering.store.port import OrderPartition, OrderStorePort, StoreUnavailableError
from shared.result import Err, Ok, Result

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 20


def merge_unique(existing: list, incoming: list) -> list:
    """Append ``incoming`` orders whose id is not already present."""
    seen = {str(order.id) for order in existing}
    merged = list(existing)
    for order in incoming:
        if str(order.id) not in seen:
            seen.add(str(order.id))
            merged.append(order)
    return merged


class OrderFeed:
    def __init__(self, store: OrderStorePort, partition: OrderPartition, page_size: int | None = None):
        self.store = store
        self.partition = OrderPartition(partition)
        self.page_size = page_size or custom_setting("ORDER_PAGE_SIZE", DEFAULT_PAGE_SIZE)
        self.orders: list = []
        self.page = -1
        self.has_more = True
        self.loading = False
        self.error: str | None = None
        self._generation = 0
        self._refresh_tasks: set[asyncio.Task] = set()

    @property
    def order_ids(self) -> list[str]:
        return [str(order.id) for order in self.orders]

    async def refresh(self) -> Result:
        """Reload from page 0, replacing the merged list."""
        self._generation += 1
        return await self._load(0, self._generation)

    async def load_more(self) -> Result:
        """Load the page after the last one loaded. No-op while loading or when exhausted."""
        if self.loading or not self.has_more:
            return Ok(self.orders)
        return await self._load(self.page + 1, self._generation)

    async def load_page(self, page: int) -> Result:
        """Load a specific page and merge it. Loading the same page twice is harmless."""
        if page == 0:
            return await self.refresh()
        return await self._load(page, self._generation)

    async def _load(self, page: int, generation: int) -> Result:
        self.loading = True
        try:
            items = await self.store.fetch_orders(self.partition, page, self.page_size)
        except StoreUnavailableError as exc:
            if generation == self._generation:
                self.loading = False
                self.error = str(exc)
            logger.warning("Order page load failed", partition=self.partition.value, page=page, error=str(exc))
            return Err(str(exc))

        if generation != self._generation:
            logger.debug("Discarding stale order page", partition=self.partition.value, page=page)
            return Ok(self.orders)

        if page == 0:
            self.orders = merge_unique([], items)
        else:
            self.orders = merge_unique(self.orders, items)
        self.page = max(self.page, page) if page else 0
        self.has_more = len(items) == self.page_size
        self.loading = False
        self.error = None
        return Ok(self.orders)

    # -------------------------------------------------------------------
    # Realtime
    # -------------------------------------------------------------------
    def attach(self):
        """Refresh from page 0 on every store change. Returns a disposer."""
        return self.store.subscribe(self._on_change)

    def _on_change(self, change: dict) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Order change received outside an event loop", change=change)
            return
        task = loop.create_task(self.refresh())
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)

    async def wait_for_refresh(self) -> None:
        """Wait until every refresh scheduled by change notifications has finished."""
        while self._refresh_tasks:
            await asyncio.gather(*list(self._refresh_tasks))
