"""Adapters binding the domain ports to concrete services and storage."""
