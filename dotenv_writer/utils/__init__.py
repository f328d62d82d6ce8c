"""Shared helpers for file handling, locking, logging and environment access."""
