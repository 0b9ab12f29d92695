"""Test doubles for transports and Redis."""
