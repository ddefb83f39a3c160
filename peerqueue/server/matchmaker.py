"""Partner selection strategies for the waiting room.

The MatchmakingQueue asks its matchmaker, under the queue lock, which
waiting participant (if any) an arriving participant should be paired with.
The default FIFOMatchmaker always picks the participant who has waited
longest.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from peerqueue.server.waiting_room import Participant

logger = logging.getLogger(__name__)


class Matchmaker(ABC):
    """Abstract base class for partner selection.

    find_match() is called each time a participant joins and is not already
    paired. It receives the arriving participant and the waiting participants
    in arrival order, and returns the chosen partner or None to indicate the
    arriving participant should wait.

    Thread safety: find_match() is called while the MatchmakingQueue holds its
    lock. Implementations must not block or mutate the waiting list; the queue
    removes the chosen partner itself.
    """

    @abstractmethod
    def find_match(
        self,
        arriving: Participant,
        waiting: list[Participant],
    ) -> Participant | None:
        """Pick a partner for the arriving participant.

        Args:
            arriving: The participant who just joined. Never in ``waiting``.
            waiting: Participants already waiting, oldest first. May be empty.

        Returns:
            Participant: One element of ``waiting`` to pair with.
            None: If the arriving participant should wait.
        """
        ...


class FIFOMatchmaker(Matchmaker):
    """First-in-first-out matching.

    Example:
        - A joins, waiting=[] -> None (A waits)
        - B joins, waiting=[A] -> A
        - With waiting=[A, B, C], D joins -> A
    """

    def find_match(
        self,
        arriving: Participant,
        waiting: list[Participant],
    ) -> Participant | None:
        if not waiting:
            logger.debug(
                f"[FIFOMatchmaker] No one waiting for {arriving.participant_id}"
            )
            return None

        partner = waiting[0]
        logger.debug(
            f"[FIFOMatchmaker] {arriving.participant_id} -> {partner.participant_id} "
            f"(waiting={[w.participant_id for w in waiting]})"
        )
        return partner
