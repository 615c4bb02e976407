"""Error taxonomy for schedule/odds reconciliation and the pick book."""

from __future__ import annotations


class TransientFetchError(RuntimeError):
    """Network or HTTP failure on a feed call.

    Not retried immediately; the next scheduled tick picks the work up again.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedRecordError(RuntimeError):
    """A single event or odds entry is missing an expected field."""

    def __init__(self, message: str, record_id: str | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id


class AmbiguousMatchError(RuntimeError):
    """An odds entry matched more than one stored game.

    Resolved deterministically by the matcher and logged; never a failure.
    """

    def __init__(self, message: str, candidate_ids: list[int]) -> None:
        super().__init__(message)
        self.candidate_ids = candidate_ids


class PersistenceError(RuntimeError):
    """A single merge or write failed."""


class PicksLockedError(RuntimeError):
    """Picks for a week can no longer be changed (deadline passed or admin lock)."""


class InvalidPickError(ValueError):
    """A submitted pick does not identify a side of a game in its week."""
