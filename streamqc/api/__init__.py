"""HTTP API for streamqc."""
