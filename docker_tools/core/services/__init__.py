"""Core services — one module per pipeline stage."""
