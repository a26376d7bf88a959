"""Utility helpers: environment configuration and logging."""
