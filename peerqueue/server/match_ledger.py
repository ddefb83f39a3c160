"""Match ledger: participant id -> confirmed partner.

A match between A and B is stored as two mirrored Pairing entries, one
keyed by A pointing to B and one keyed by B pointing to A. Both entries are
always inserted together. They may be deleted independently, since each
side confirms (or is reclaimed) on its own.

Like the waiting room, the ledger relies on its owning MatchmakingQueue
for locking.
"""

from __future__ import annotations

import dataclasses

from peerqueue.server.waiting_room import Participant
from peerqueue.utils.typing import ParticipantID


@dataclasses.dataclass(frozen=True)
class Pairing:
    """One side of a match.

    Attributes:
        owner_id: Participant this entry belongs to
        partner_id: Participant the owner was matched with
        partner_name: Display name of the partner
        created_at: Clock time the match was made (shared by both sides)
    """

    owner_id: ParticipantID
    partner_id: ParticipantID
    partner_name: str
    created_at: float


class MatchLedger:
    def __init__(self):
        # owner_id -> Pairing
        self._pairings: dict[ParticipantID, Pairing] = {}

    def __len__(self) -> int:
        return len(self._pairings)

    def __contains__(self, participant_id: ParticipantID) -> bool:
        return participant_id in self._pairings

    def get(self, participant_id: ParticipantID) -> Pairing | None:
        return self._pairings.get(participant_id)

    def pair(
        self, first: Participant, second: Participant, created_at: float
    ) -> tuple[Pairing, Pairing]:
        """Record a match as two mirrored entries stamped with the same time.

        Returns:
            (first's entry, second's entry)
        """
        first_side = Pairing(
            owner_id=first.participant_id,
            partner_id=second.participant_id,
            partner_name=second.display_name,
            created_at=created_at,
        )
        second_side = Pairing(
            owner_id=second.participant_id,
            partner_id=first.participant_id,
            partner_name=first.display_name,
            created_at=created_at,
        )
        self._pairings[first.participant_id] = first_side
        self._pairings[second.participant_id] = second_side
        return first_side, second_side

    def remove(self, participant_id: ParticipantID) -> Pairing | None:
        """Delete the caller's entry only. Absent ids are a no-op."""
        return self._pairings.pop(participant_id, None)

    def confirm(self, participant_id: ParticipantID) -> Pairing | None:
        """Acknowledge a match from one side.

        Only the caller's entry is deleted. The partner's mirrored entry stays
        until the partner confirms or the sweep reclaims it.
        """
        return self.remove(participant_id)

    def dissolve(self, participant_id: ParticipantID) -> list[Pairing]:
        """Delete the caller's entry and the partner's mirrored entry.

        The partner's entry is only deleted if it still points back at the
        caller, so a partner that has since been matched with someone else
        keeps its new pairing.
        """
        removed = []
        own = self._pairings.pop(participant_id, None)
        if own is None:
            return removed
        removed.append(own)

        mirrored = self._pairings.get(own.partner_id)
        if mirrored is not None and mirrored.partner_id == participant_id:
            removed.append(self._pairings.pop(own.partner_id))
        return removed

    def evict_older_than(self, cutoff: float) -> list[Pairing]:
        """Delete every entry created strictly before ``cutoff``."""
        evicted = [p for p in self._pairings.values() if p.created_at < cutoff]
        for pairing in evicted:
            del self._pairings[pairing.owner_id]
        return evicted

    def snapshot(self) -> list[Pairing]:
        return list(self._pairings.values())
