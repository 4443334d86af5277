"""Triage domain - the rating state machine."""

from .engine import EngineState, TriageEngine

__all__ = ["EngineState", "TriageEngine"]
