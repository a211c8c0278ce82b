"""Use-case layer for the server-control screen.

Each module coordinates domain objects and ports without performing transport
I/O directly, preserving MVVM + Hexagonal boundaries.
"""
