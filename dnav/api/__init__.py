"""HTTP API for local decision candidate extraction."""
