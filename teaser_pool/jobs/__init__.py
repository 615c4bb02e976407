"""Celery tasks for the teaser pool sync service."""
