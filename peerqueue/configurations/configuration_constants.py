from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True)
class DisconnectPolicies:
    """What a transport disconnect removes.

    PreserveMatch only drops the participant from the waiting room so a
    reconnecting client can still retrieve its match. DropMatch also deletes
    the participant's ledger entry.
    """

    PreserveMatch = "preserve_match"
    DropMatch = "drop_match"


@dataclasses.dataclass(frozen=True)
class ConfirmPolicies:
    """What a confirm call deletes from the match ledger.

    CallerOnly deletes the caller's entry and leaves the partner's mirrored
    entry for the partner to confirm (or for the sweep to reclaim). BothSides
    deletes both mirrored entries at once.
    """

    CallerOnly = "caller_only"
    BothSides = "both_sides"


@dataclasses.dataclass(frozen=True)
class Defaults:
    QueueTimeoutS = 120
    MatchTimeoutS = 300
    SweepIntervalS = 30
    DisplayName = "Anonymous"
    Port = 9000
    LogFile = "./peerqueue.log"
