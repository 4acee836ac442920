"""Application layer: timers, probe runners, the status mirror and wiring."""
