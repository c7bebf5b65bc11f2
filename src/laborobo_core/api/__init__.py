"""HTTP API for Laborobo core."""
