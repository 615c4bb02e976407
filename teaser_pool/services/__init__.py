"""Sync and standings services.

Modules are imported directly (``from teaser_pool.services.sync import ...``)
so that importing one service does not pull in the feed clients of another.
"""
