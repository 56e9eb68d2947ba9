"""Domain models.

Plain, strict data structures (Pydantic v2). Nothing here performs I/O.
"""
