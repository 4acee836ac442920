"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (health probe over HTTP,
    activity stores on disk and in memory).

Dependencies:
    Individual submodules depend on ``requests``, ``pydantic`` serialization of
    domain models, filesystem APIs, and domain protocol definitions.

Call context:
    Imported by app composition code, the REST service and tests.
"""
