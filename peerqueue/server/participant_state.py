"""Participant lifecycle status.

Status is derived from the waiting room and match ledger rather than
tracked separately, so it can never disagree with them:
- IDLE: Neither waiting nor paired (never joined, left, confirmed, or reclaimed)
- WAITING: In the waiting room
- MATCHED: Has a pairing in the match ledger
"""

from __future__ import annotations

from enum import Enum, auto


class ParticipantStatus(Enum):
    IDLE = auto()
    WAITING = auto()
    MATCHED = auto()
