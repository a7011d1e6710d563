"""Shared types, errors, configuration and logging for neondocker."""
