"""Credential providers (static key, callables, stored OAuth credentials)."""
