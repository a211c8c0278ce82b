"""Control surface for a remote server manager (health, start, stop)."""
