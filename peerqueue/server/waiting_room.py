"""Ordered waiting room of participants who have no partner yet.

The waiting room does no locking of its own. It is owned by a
MatchmakingQueue, which serializes every access together with the match
ledger under a single lock.
"""

from __future__ import annotations

import dataclasses

from peerqueue.utils.typing import ParticipantID


@dataclasses.dataclass
class Participant:
    """A participant waiting to be matched.

    Attributes:
        participant_id: Unique identifier supplied by the client
        display_name: Name shown to the eventual partner
        enqueued_at: Clock time at which the participant entered the room
    """

    participant_id: ParticipantID
    display_name: str
    enqueued_at: float


class WaitingRoom:
    """Participants in arrival order, oldest first."""

    def __init__(self):
        self._participants: list[Participant] = []

    def size(self) -> int:
        return len(self._participants)

    def contains(self, participant_id: ParticipantID) -> bool:
        return any(p.participant_id == participant_id for p in self._participants)

    def add(self, participant: Participant) -> int:
        """Append a participant and return its 1-based position."""
        self._participants.append(participant)
        return len(self._participants)

    def remove(self, participant_id: ParticipantID) -> Participant | None:
        """Remove a participant if present.

        Returns:
            The removed Participant, or None if it was not waiting.
        """
        for index, participant in enumerate(self._participants):
            if participant.participant_id == participant_id:
                return self._participants.pop(index)
        return None

    def evict_older_than(self, cutoff: float) -> list[Participant]:
        """Remove every participant enqueued strictly before ``cutoff``."""
        evicted = [p for p in self._participants if p.enqueued_at < cutoff]
        if evicted:
            self._participants = [
                p for p in self._participants if p.enqueued_at >= cutoff
            ]
        return evicted

    def snapshot(self) -> list[Participant]:
        """Copy of the waiting participants, oldest first."""
        return list(self._participants)
