"""Background sweep that reclaims abandoned waiting-room and ledger entries.

Eviction is a plain deletion. Nobody is notified; an evicted participant
simply sees "not matched" / "not in queue" on its next poll and has to join
again.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import eventlet

if TYPE_CHECKING:
    from peerqueue.server.matchmaking_queue import MatchmakingQueue

logger = logging.getLogger(__name__)


class Reclaimer:
    """
    Periodically evicts waiting participants older than ``queue_timeout_s``
    and pairings older than ``match_timeout_s``.

    The loop runs in an eventlet green thread. sweep() can also be called
    directly, which is how tests drive it with an injected clock.
    """

    def __init__(
        self,
        queue: MatchmakingQueue,
        interval_s: float,
        queue_timeout_s: float,
        match_timeout_s: float,
    ):
        self.queue = queue
        self.interval_s = interval_s
        self.queue_timeout_s = queue_timeout_s
        self.match_timeout_s = match_timeout_s

        self._running = False
        self._thread = None

    @property
    def running(self) -> bool:
        return self._running

    def sweep(self) -> tuple[int, int]:
        """Evict stale entries from both structures.

        Takes the queue lock, so a sweep never interleaves with a join,
        leave, confirm or disconnect.

        Returns:
            (waiting participants removed, ledger entries removed)
        """
        with self.queue.lock:
            now = self.queue.clock()
            stale_waiting = self.queue.room.evict_older_than(now - self.queue_timeout_s)
            stale_pairings = self.queue.ledger.evict_older_than(now - self.match_timeout_s)

        for participant in stale_waiting:
            logger.info(
                f"[Cleanup] Removing stale queue entry: {participant.display_name} "
                f"({participant.participant_id})"
            )
        for pairing in stale_pairings:
            logger.info(f"[Cleanup] Removing stale match: {pairing.owner_id}")

        if stale_waiting or stale_pairings:
            logger.info(
                f"[Cleanup] Removed {len(stale_waiting)} queue, "
                f"{len(stale_pairings)} matches"
            )
        return len(stale_waiting), len(stale_pairings)

    def start(self) -> None:
        """Spawn the sweep loop. Calling start() on a running reclaimer is a no-op."""
        if self._running:
            logger.warning("Reclaimer already running")
            return

        self._running = True

        def _sweep_loop():
            logger.info(f"Reclaimer started (interval: {self.interval_s}s)")
            while self._running:
                eventlet.sleep(self.interval_s)
                if not self._running:
                    break
                try:
                    self.sweep()
                except Exception as e:
                    logger.error(f"Error in reclaimer sweep: {e}")

        self._thread = eventlet.spawn(_sweep_loop)

    def stop(self) -> None:
        """Cancel the sweep loop."""
        if not self._running:
            return
        self._running = False
        if self._thread is not None:
            self._thread.kill()
            self._thread = None
        logger.info("Reclaimer stopped")
