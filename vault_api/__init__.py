"""HTTP API for the password vault."""
