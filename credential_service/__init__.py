"""Credential service: user accounts, salted password hashing, role and status changes."""

__version__ = "1.0.0"
