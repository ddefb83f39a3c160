from __future__ import annotations


class _NotProvided:
    """Marks a builder argument the caller did not pass."""

    def __repr__(self):
        return "NotProvided"


NotProvided = _NotProvided()
