"""App composition: dispatcher wiring, consumer context and screen lifetime."""
