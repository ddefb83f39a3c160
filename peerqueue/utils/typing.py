from __future__ import annotations

ParticipantID = str
SessionID = str
