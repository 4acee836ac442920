"""Use-case layer for backend health and activity tracking.

Each module coordinates domain objects and ports without performing transport
I/O directly.
"""
