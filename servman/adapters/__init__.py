"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (HTTP command endpoint
    and local user-name/settings storage).

Dependencies:
    Individual submodules depend on ``requests``, filesystem APIs, and domain
    protocol definitions.

Call context:
    Imported by app composition modules (for runtime wiring) and by tests (for
    transport-level behavior verification).
"""
