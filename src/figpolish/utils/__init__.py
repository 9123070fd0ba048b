"""Small shared helpers (logging, dictionary merging)."""
