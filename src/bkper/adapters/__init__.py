"""Adapters: everything that touches the network or the filesystem."""
