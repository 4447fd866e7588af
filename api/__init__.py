"""Ranked challenge tracker HTTP API."""
