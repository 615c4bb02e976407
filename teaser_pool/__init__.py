"""Teaser pool sync service: schedule/odds reconciliation and live standings."""
