"""Small shared helpers (query batching)."""
