# goaltracker/utils/realtime.py
"""
Live goal queries.

Every subscriber gets complete snapshots of its owner's goals: one after the
initial query and a fresh one after each committed mutation. Snapshots are
never patched; a newer snapshot replaces any snapshot still waiting to be read.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Set, Union

from goaltracker.core.errors import GoalStoreError
from goaltracker.schemas.goal import GoalRead

logger = logging.getLogger(__name__)

Snapshot = List[GoalRead]
SnapshotLoader = Callable[[str], Awaitable[Snapshot]]

_CLOSED = object()


class GoalSubscription:
    """Cancellable async iterator of full goal snapshots for one owner."""

    def __init__(self, hub: "SnapshotHub", owner_id: str):
        self.owner_id = owner_id
        self._hub = hub
        self._queue: asyncio.Queue = asyncio.Queue()
        self._last_sequence = 0
        self.closed = False

    def _drain(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()

    def push(self, snapshot: Snapshot, sequence: int) -> None:
        # Loads can finish out of order; never let an older snapshot win
        if self.closed or sequence <= self._last_sequence:
            return
        self._last_sequence = sequence
        self._drain()
        self._queue.put_nowait(list(snapshot))

    def fail(self, error: GoalStoreError) -> None:
        if self.closed:
            return
        self.closed = True
        self._hub._detach(self)
        self._drain()
        self._queue.put_nowait(error)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._hub._detach(self)
        self._drain()
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "GoalSubscription":
        return self

    async def __anext__(self) -> Snapshot:
        if self.closed and self._queue.empty():
            raise StopAsyncIteration
        item: Union[Snapshot, GoalStoreError, object] = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        if isinstance(item, GoalStoreError):
            raise item
        return item

    async def __aenter__(self) -> "GoalSubscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class SnapshotHub:
    """Live subscriptions keyed by owner id."""

    def __init__(self, loader: SnapshotLoader):
        self._loader = loader
        self._subscriptions: Dict[str, List[GoalSubscription]] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._sequence = 0

    def subscribe(self, owner_id: str) -> GoalSubscription:
        subscription = GoalSubscription(self, owner_id)
        self._subscriptions.setdefault(owner_id, []).append(subscription)
        logger.info(f"Goal subscription opened for {owner_id}, total: {self.active_count(owner_id)}")

        task = asyncio.create_task(self._deliver(owner_id, [subscription]))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return subscription

    def _detach(self, subscription: GoalSubscription) -> None:
        subscriptions = self._subscriptions.get(subscription.owner_id, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)
        if not subscriptions:
            self._subscriptions.pop(subscription.owner_id, None)
        logger.info(
            f"Goal subscription closed for {subscription.owner_id}, "
            f"total: {self.active_count(subscription.owner_id)}"
        )

    def active_count(self, owner_id: str) -> int:
        return len(self._subscriptions.get(owner_id, []))

    async def publish(self, owner_id: str) -> None:
        """Re-run the owner's query and push the result to every subscriber."""
        subscriptions = list(self._subscriptions.get(owner_id, []))
        if subscriptions:
            await self._deliver(owner_id, subscriptions)

    async def _deliver(self, owner_id: str, subscriptions: List[GoalSubscription]) -> None:
        self._sequence += 1
        sequence = self._sequence
        try:
            snapshot = await self._loader(owner_id)
        except Exception as e:
            logger.error(f"Error fetching goals for {owner_id}: {str(e)}")
            for subscription in subscriptions:
                error = GoalStoreError(f"Error fetching goals: {str(e)}")
                error.__cause__ = e
                subscription.fail(error)
            return

        for subscription in subscriptions:
            subscription.push(snapshot, sequence)

    async def close_all(self) -> None:
        for subscriptions in list(self._subscriptions.values()):
            for subscription in list(subscriptions):
                subscription.close()

        # Wait for cancelled loads so none still holds a connection
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
