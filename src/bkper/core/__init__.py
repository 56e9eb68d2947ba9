"""Core of the client: configuration, contracts, domain models and services."""
