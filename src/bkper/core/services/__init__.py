"""Thin API services built on the request executor."""
