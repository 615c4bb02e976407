"""Persistence layer: games, weeks, picks and admin operations."""

from .games import (
    find_games_in_window,
    get_game_by_external_id,
    merge_game,
    normalize_status,
    query_games,
    tracked_weeks,
    update_spread,
)
from .picks import are_picks_locked, list_week_picks, replace_picks
from .weeks import (
    create_week,
    ensure_current_week,
    get_current_week,
    get_week,
    set_current_week,
)

__all__ = [
    "are_picks_locked",
    "create_week",
    "ensure_current_week",
    "find_games_in_window",
    "get_current_week",
    "get_game_by_external_id",
    "get_week",
    "list_week_picks",
    "merge_game",
    "normalize_status",
    "query_games",
    "replace_picks",
    "set_current_week",
    "tracked_weeks",
    "update_spread",
]
