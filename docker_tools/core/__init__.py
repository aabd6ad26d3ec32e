"""Core — acquisition pipeline, install state machine and host probes."""
