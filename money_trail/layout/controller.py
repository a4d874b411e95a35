"""Layout Controller - Drive a force simulation from the asyncio event loop.

One step runs per scheduled callback, so callers can stop, restart, pin or
swap the graph between any two steps. Snapshots go to subscribers at most
once per ``snapshot_interval``; a final snapshot is always published when
the layout settles.
"""

import asyncio
import time
from collections.abc import Callable, Iterable

import structlog

from money_trail.graph.model import Edge, Node

from .simulation import ForceSimulation, LayoutOptions, LayoutSnapshot

logger = structlog.get_logger()

SnapshotCallback = Callable[[LayoutSnapshot], None]


class LayoutController:
    """Scheduled wrapper around ``ForceSimulation``.

    Holds at most one pending timer handle; ``stop()``, ``close()`` and
    ``update_graph()`` cancel it so no recurring work leaks.
    """

    def __init__(
        self,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        options: LayoutOptions,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.options = options
        self.simulation = ForceSimulation(nodes, edges, options)
        self._loop = loop
        self._clock = clock
        self._subscribers: list[SnapshotCallback] = []
        self._handle: asyncio.Handle | None = None
        self._last_publish: float | None = None
        self._settled_event: asyncio.Event | None = None
        self._closed = False

    # ─── Subscriptions ──────────────────────────────

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """Register a render sink. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, snapshot: LayoutSnapshot) -> None:
        self._last_publish = self._clock()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.warning("snapshot_subscriber_failed", error=str(e))

    # ─── Scheduling ─────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._handle is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def start(self) -> None:
        """Begin stepping on the event loop. No-op if already running or closed."""
        if self._closed or self._handle is not None:
            return
        self._handle = self._get_loop().call_soon(self._tick)

    def _tick(self) -> None:
        self._handle = None
        if self._closed:
            return

        self.simulation.step()

        if self.simulation.settled:
            self._publish(self.simulation.snapshot())
            self._wake_waiters()
            logger.debug("layout_run_finished", ticks=self.simulation.tick_count)
            return

        # Schedule before publishing so a subscriber can stop() between steps.
        self._handle = self._get_loop().call_later(self.options.step_interval, self._tick)

        now = self._clock()
        if self._last_publish is None or now - self._last_publish >= self.options.snapshot_interval:
            self._publish(self.simulation.snapshot())

    def _wake_waiters(self) -> None:
        if self._settled_event is not None:
            self._settled_event.set()

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    # ─── Controls ───────────────────────────────────

    def restart(self) -> None:
        """Reset alpha to its maximum, keeping positions, and resume stepping."""
        self.simulation.restart()
        self.start()

    def stop(self) -> None:
        """Stop scheduling further steps. Positions are kept.

        Pending ``wait_until_settled()`` calls return the current, possibly
        unsettled, snapshot.
        """
        self._cancel()
        self._wake_waiters()

    def pin(self, node_id: str, x: float, y: float) -> bool:
        """Pin a node (drag) and resume stepping so neighbors react."""
        pinned = self.simulation.pin(node_id, x, y)
        if pinned:
            self.start()
        return pinned

    def release(self, node_id: str) -> bool:
        return self.simulation.release(node_id)

    def update_graph(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        """Replace the input graph: discard the old simulation and start fresh."""
        was_running = self.is_running
        self._cancel()
        self.simulation = ForceSimulation(nodes, edges, self.options)
        self._last_publish = None
        if was_running:
            self.start()

    def close(self) -> None:
        self._cancel()
        self._subscribers.clear()
        self._closed = True
        self._wake_waiters()

    def snapshot(self) -> LayoutSnapshot:
        return self.simulation.snapshot()

    # ─── Helpers ────────────────────────────────────

    async def wait_until_settled(self) -> LayoutSnapshot:
        """Start if needed and wait for the settled snapshot.

        Returns early, with the snapshot at that moment, if the controller is
        stopped or closed first.
        """
        if self._closed:
            return self.simulation.snapshot()
        if self._settled_event is None:
            self._settled_event = asyncio.Event()
        self._settled_event.clear()
        self.start()
        await self._settled_event.wait()
        return self.simulation.snapshot()

    def run_until_settled(self, max_steps: int = 1000) -> LayoutSnapshot:
        """Step synchronously (no event loop) and publish the final snapshot."""
        self._cancel()
        self.simulation.run(max_steps)
        snapshot = self.simulation.snapshot()
        self._publish(snapshot)
        return snapshot


def create_layout(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    options: LayoutOptions,
    loop: asyncio.AbstractEventLoop | None = None,
) -> LayoutController:
    """Build a layout controller for a node/edge list. Call ``start()`` to run it."""
    return LayoutController(nodes, edges, options, loop=loop)
