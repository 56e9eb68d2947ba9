"""Core interfaces.

Structural contracts (Protocol) implemented by concrete adapters.
"""
