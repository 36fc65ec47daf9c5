"""Shared utilities for scrivo."""
