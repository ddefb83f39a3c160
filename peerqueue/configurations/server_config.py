from __future__ import annotations

import logging
import os

from peerqueue.configurations.configuration_constants import (
    ConfirmPolicies,
    Defaults,
    DisconnectPolicies,
)
from peerqueue.utils.sentinels import NotProvided

logger = logging.getLogger(__name__)


class ServerConfig:
    def __init__(self):

        # Hosting
        self.host: str | None = None
        self.port: int = int(os.environ.get("PORT", Defaults.Port))
        self.cors_allowed_origins: str = "*"

        # Matchmaking
        self.queue_timeout_s: float = Defaults.QueueTimeoutS
        self.match_timeout_s: float = Defaults.MatchTimeoutS
        self.sweep_interval_s: float = Defaults.SweepIntervalS
        self.disconnect_policy: str = DisconnectPolicies.PreserveMatch
        self.confirm_policy: str = ConfirmPolicies.CallerOnly
        self.default_display_name: str = Defaults.DisplayName

        # Logging
        self.log_file: str | None = Defaults.LogFile
        self.log_level: int = logging.INFO

    def hosting(
        self,
        host: str | None = NotProvided,
        port: int = NotProvided,
        cors_allowed_origins: str = NotProvided,
    ) -> ServerConfig:
        if host is not NotProvided:
            self.host = host

        if port is not NotProvided:
            self.port = port

        if cors_allowed_origins is not NotProvided:
            self.cors_allowed_origins = cors_allowed_origins

        return self

    def matchmaking(
        self,
        queue_timeout_s: float = NotProvided,
        match_timeout_s: float = NotProvided,
        sweep_interval_s: float = NotProvided,
        disconnect_policy: str = NotProvided,
        confirm_policy: str = NotProvided,
        default_display_name: str = NotProvided,
    ) -> ServerConfig:
        """Configure the waiting room, the match ledger and the stale-entry sweep.

        :param queue_timeout_s: Seconds a participant may wait unmatched before
            the sweep evicts them from the waiting room.
        :param match_timeout_s: Seconds an unconfirmed pairing is kept before the
            sweep evicts it from the match ledger.
        :param sweep_interval_s: Seconds between two sweeps.
        :param disconnect_policy: One of ``DisconnectPolicies``. Controls whether a
            transport disconnect also drops the participant's pairing.
        :param confirm_policy: One of ``ConfirmPolicies``. Controls whether a
            confirm deletes only the caller's ledger entry or both entries.
        :param default_display_name: Name used when a participant joins without one.
        """
        for name, value in (
            ("queue_timeout_s", queue_timeout_s),
            ("match_timeout_s", match_timeout_s),
            ("sweep_interval_s", sweep_interval_s),
        ):
            if value is NotProvided:
                continue
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
            setattr(self, name, value)

        if disconnect_policy is not NotProvided:
            valid = (DisconnectPolicies.PreserveMatch, DisconnectPolicies.DropMatch)
            if disconnect_policy not in valid:
                raise ValueError(
                    f"Unknown disconnect_policy {disconnect_policy!r}, expected one of {valid}"
                )
            self.disconnect_policy = disconnect_policy
            if disconnect_policy == DisconnectPolicies.DropMatch:
                logger.info(
                    "Disconnect policy set to drop_match: reconnecting clients "
                    "will not recover their pairing."
                )

        if confirm_policy is not NotProvided:
            valid = (ConfirmPolicies.CallerOnly, ConfirmPolicies.BothSides)
            if confirm_policy not in valid:
                raise ValueError(
                    f"Unknown confirm_policy {confirm_policy!r}, expected one of {valid}"
                )
            self.confirm_policy = confirm_policy

        if default_display_name is not NotProvided:
            self.default_display_name = default_display_name

        return self

    def logging(
        self,
        log_file: str | None = NotProvided,
        level: int = NotProvided,
    ) -> ServerConfig:
        """Set the log file (None disables the file handler) and log level."""
        if log_file is not NotProvided:
            self.log_file = log_file

        if level is not NotProvided:
            self.log_level = level

        return self
