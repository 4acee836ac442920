"""ViewModel package for UI state and command surfaces.

Modules in this package depend on domain types and lightweight formatting
helpers only. I/O adapters and use-case orchestration remain outside.
"""
