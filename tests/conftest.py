"""
Shared pytest fixtures for peerqueue tests.

Provides:
- clock: A manually advanced clock, injected into MatchmakingQueue so
  staleness tests never sleep
- queue: A MatchmakingQueue with default policies driven by ``clock``
"""

from __future__ import annotations

import pytest

from peerqueue.server.matchmaking_queue import MatchmakingQueue


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def queue(clock):
    q = MatchmakingQueue(clock=clock)
    yield q
    q.shutdown()
