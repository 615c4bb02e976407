"""Shared helpers: parsing, datetimes, distributed locks."""
