"""Cache-or-generate engine: planning, rewriting, storage and the caches."""
