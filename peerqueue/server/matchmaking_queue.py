"""Process-wide matchmaking state.

MatchmakingQueue owns one WaitingRoom, one MatchLedger and the lock that
guards both. Every request handler, the transport lifecycle hooks and the
reclaimer go through it, so a participant is never in the waiting room and
the ledger at the same time, and a pairing is never observed half-written.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from typing import Callable

from peerqueue.configurations.configuration_constants import (
    ConfirmPolicies,
    Defaults,
    DisconnectPolicies,
)
from peerqueue.server.match_ledger import MatchLedger
from peerqueue.server.matchmaker import FIFOMatchmaker, Matchmaker
from peerqueue.server.participant_state import ParticipantStatus
from peerqueue.server.reclaimer import Reclaimer
from peerqueue.server.waiting_room import Participant, WaitingRoom
from peerqueue.utils.typing import ParticipantID

logger = logging.getLogger(__name__)


class InvalidParticipantId(ValueError):
    """Raised when a request does not carry a usable participant id."""


@dataclasses.dataclass
class JoinResult:
    matched: bool
    partner_id: ParticipantID | None = None
    partner_name: str | None = None
    position: int | None = None

    def to_dict(self) -> dict:
        if self.matched:
            return {
                "matched": True,
                "partnerId": self.partner_id,
                "partnerName": self.partner_name,
            }
        return {"matched": False, "position": self.position}


@dataclasses.dataclass
class PollResult:
    matched: bool
    partner_id: ParticipantID | None = None
    partner_name: str | None = None
    in_queue: bool = False

    def to_dict(self) -> dict:
        if self.matched:
            return {
                "matched": True,
                "partnerId": self.partner_id,
                "partnerName": self.partner_name,
            }
        return {"matched": False, "inQueue": self.in_queue}


def validate_participant_id(participant_id) -> ParticipantID:
    if not isinstance(participant_id, str) or not participant_id.strip():
        raise InvalidParticipantId("id required")
    return participant_id


class MatchmakingQueue:
    """
    Pairs waiting participants one-to-one in FIFO order and keeps each
    pairing until it is confirmed, left, or reclaimed.

    Every public method returns immediately with a snapshot of the state at
    the time of the call; clients poll for match completion.
    """

    def __init__(
        self,
        matchmaker: Matchmaker | None = None,
        clock: Callable[[], float] = time.time,
        queue_timeout_s: float = Defaults.QueueTimeoutS,
        match_timeout_s: float = Defaults.MatchTimeoutS,
        sweep_interval_s: float = Defaults.SweepIntervalS,
        disconnect_policy: str = DisconnectPolicies.PreserveMatch,
        confirm_policy: str = ConfirmPolicies.CallerOnly,
        default_display_name: str = Defaults.DisplayName,
    ):
        self.matchmaker = matchmaker or FIFOMatchmaker()
        self.clock = clock
        self.disconnect_policy = disconnect_policy
        self.confirm_policy = confirm_policy
        self.default_display_name = default_display_name

        self.room = WaitingRoom()
        self.ledger = MatchLedger()

        # Guards room and ledger together
        self.lock = threading.Lock()

        self.reclaimer = Reclaimer(
            self,
            interval_s=sweep_interval_s,
            queue_timeout_s=queue_timeout_s,
            match_timeout_s=match_timeout_s,
        )

    @classmethod
    def from_config(cls, config, **kwargs) -> MatchmakingQueue:
        return cls(
            queue_timeout_s=config.queue_timeout_s,
            match_timeout_s=config.match_timeout_s,
            sweep_interval_s=config.sweep_interval_s,
            disconnect_policy=config.disconnect_policy,
            confirm_policy=config.confirm_policy,
            default_display_name=config.default_display_name,
            **kwargs,
        )

    def join(self, participant_id: ParticipantID, name: str | None = None) -> JoinResult:
        """Admit a participant, pairing it with the longest-waiting participant if any.

        Joining while already paired returns the existing pairing unchanged
        (reconnect). Joining while already waiting drops the earlier entry
        before matching, so a participant is never paired with itself.

        Raises:
            InvalidParticipantId: If ``participant_id`` is missing or blank.
                Nothing is mutated in that case.
        """
        participant_id = validate_participant_id(participant_id)
        name = name or self.default_display_name

        with self.lock:
            existing = self.ledger.get(participant_id)
            if existing is not None:
                logger.info(
                    f"[Queue] {name} already matched with {existing.partner_name}, "
                    f"returning existing match"
                )
                return JoinResult(
                    matched=True,
                    partner_id=existing.partner_id,
                    partner_name=existing.partner_name,
                )

            self.room.remove(participant_id)

            now = self.clock()
            arriving = Participant(
                participant_id=participant_id, display_name=name, enqueued_at=now
            )
            partner = self.matchmaker.find_match(arriving, self.room.snapshot())

            if partner is not None:
                self.room.remove(partner.participant_id)
                self.ledger.pair(arriving, partner, created_at=now)
                logger.info(f"[Match] {name} <-> {partner.display_name}")
                return JoinResult(
                    matched=True,
                    partner_id=partner.participant_id,
                    partner_name=partner.display_name,
                )

            position = self.room.add(arriving)
            logger.info(f"[Queue] {name} joined, queue size: {position}")
            return JoinResult(matched=False, position=position)

    def poll(self, participant_id: ParticipantID) -> PollResult:
        """Report whether a participant has been matched yet.

        Polling does not consume the pairing; it stays until confirmed.
        """
        with self.lock:
            pairing = self.ledger.get(participant_id)
            if pairing is not None:
                return PollResult(
                    matched=True,
                    partner_id=pairing.partner_id,
                    partner_name=pairing.partner_name,
                )
            return PollResult(matched=False, in_queue=self.room.contains(participant_id))

    def confirm(self, participant_id: ParticipantID) -> None:
        with self.lock:
            if self.confirm_policy == ConfirmPolicies.BothSides:
                removed = self.ledger.dissolve(participant_id)
            else:
                pairing = self.ledger.confirm(participant_id)
                removed = [pairing] if pairing is not None else []

        for pairing in removed:
            logger.info(f"[Match] Confirmed, released ledger entry for {pairing.owner_id}")

    def leave(self, participant_id: ParticipantID) -> None:
        """Remove a participant from the room and drop its own ledger entry.

        Leaving is idempotent; leaving an unknown id does nothing.
        """
        with self.lock:
            left = self.room.remove(participant_id)
            self.ledger.remove(participant_id)
            queue_size = self.room.size()

        if left is not None:
            logger.info(f"[Queue] {left.display_name} left, queue size: {queue_size}")

    def status(self, participant_id: ParticipantID) -> ParticipantStatus:
        with self.lock:
            if participant_id in self.ledger:
                return ParticipantStatus.MATCHED
            if self.room.contains(participant_id):
                return ParticipantStatus.WAITING
            return ParticipantStatus.IDLE

    def health(self) -> dict:
        with self.lock:
            return {
                "status": "ok",
                "queueSize": self.room.size(),
                "pendingPairings": len(self.ledger),
            }

    def debug_dump(self) -> dict:
        """Full room and ledger contents, for diagnostics only."""
        with self.lock:
            now = self.clock()
            waiting = self.room.snapshot()
            pairings = self.ledger.snapshot()

        return {
            "queue": [
                {
                    "id": p.participant_id,
                    "name": p.display_name,
                    "waitingMs": int((now - p.enqueued_at) * 1000),
                }
                for p in waiting
            ],
            "matches": [
                {
                    "id": p.owner_id,
                    "partnerId": p.partner_id,
                    "partnerName": p.partner_name,
                    "ageMs": int((now - p.created_at) * 1000),
                }
                for p in pairings
            ],
        }

    ################################
    # Transport lifecycle hooks    #
    ################################

    def on_connect(self, participant_id: ParticipantID) -> None:
        logger.info(f"[Peer] Connected: {participant_id}")

    def on_disconnect(self, participant_id: ParticipantID) -> None:
        """Drop a disconnected participant from the waiting room.

        Under the preserve_match policy the ledger is left alone so the
        participant can recover its match after reconnecting; stale pairings
        are left to the reclaimer.
        """
        logger.info(f"[Peer] Disconnected: {participant_id}")

        with self.lock:
            left = self.room.remove(participant_id)
            dropped = None
            if self.disconnect_policy == DisconnectPolicies.DropMatch:
                dropped = self.ledger.remove(participant_id)

        if left is not None:
            logger.info(f"[Queue] Removing disconnected: {left.display_name}")
        if dropped is not None:
            logger.info(f"[Match] Dropping match of disconnected: {participant_id}")

    ################################
    # Reclaimer                    #
    ################################

    def sweep(self) -> tuple[int, int]:
        return self.reclaimer.sweep()

    def start(self) -> None:
        self.reclaimer.start()

    def shutdown(self) -> None:
        self.reclaimer.stop()
