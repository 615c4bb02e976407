"""Live schedule/score feed clients."""

from .espn import ESPNScheduleClient

__all__ = ["ESPNScheduleClient"]
