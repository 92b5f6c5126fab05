"""Utility modules for stabimg."""
