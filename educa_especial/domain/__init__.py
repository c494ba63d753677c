"""Entity definitions, identifiers and date helpers (no I/O here)."""
