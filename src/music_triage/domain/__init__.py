"""Domain layer: queues, playback and the triage state machine."""
