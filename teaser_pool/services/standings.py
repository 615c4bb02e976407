"""StandingsEngine: live elimination status and payout deltas.

Everything here is a pure function of the picks/games/participants passed
in. Nothing is read from or written to the database, so standings can be
recomputed on every refresh from whatever snapshot the caller holds.

Payout is zero-sum: every alive participant collects one unit from every
eliminated participant.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from ..db import STARTED_STATUSES


class TiePolicy(str, Enum):
    """How an exact tie after the tease is scored."""

    LOSS = "loss"
    PUSH = "push"


class ParticipantStatus(str, Enum):
    WAITING = "waiting"
    ALIVE = "alive"
    ELIMINATED = "eliminated"


class PickOutcome(str, Enum):
    PENDING = "pending"
    WINNING = "winning"
    PUSH = "push"
    LOSING = "losing"


@dataclass(frozen=True)
class PickResult:
    pick_slot: int
    team: str
    game_id: int | None
    teased_spread: float | None
    # team score + teased spread - opponent score; None until kickoff
    margin: float | None
    outcome: PickOutcome


@dataclass(frozen=True)
class ParticipantStanding:
    participant_id: int
    display_name: str | None
    status: ParticipantStatus
    picks: tuple[PickResult, ...]
    delta: int


@dataclass(frozen=True)
class LiveStandings:
    standings: tuple[ParticipantStanding, ...]
    alive_count: int
    eliminated_count: int
    waiting_count: int
    tease_points: float
    tie_policy: TiePolicy

    @property
    def total_delta(self) -> int:
        return sum(standing.delta for standing in self.standings)

    def for_participant(self, participant_id: int) -> ParticipantStanding | None:
        for standing in self.standings:
            if standing.participant_id == participant_id:
                return standing
        return None


def teased_spread(team: str, game: Any, tease_points: float) -> float:
    """Spread for `team` after the tease.

    The stored spread is home-relative, so the away side gets its negation.
    A game without a line is treated as a pick'em.
    """
    spread = game.spread if game.spread is not None else 0.0
    if team == game.home_team:
        return spread + tease_points
    return -spread + tease_points


def _has_started(game: Any) -> bool:
    return (game.status or "").lower() in STARTED_STATUSES


def _game_for_team(team: str, games: Sequence[Any]) -> Any | None:
    candidates = [g for g in games if team in (g.home_team, g.away_team)]
    if not candidates:
        return None
    return min(candidates, key=lambda g: g.id)


def evaluate_pick(
    pick: Any,
    games: Sequence[Any],
    tease_points: float,
    tie_policy: TiePolicy = TiePolicy.LOSS,
) -> PickResult:
    team = (pick.picked_team or "").upper()
    game = _game_for_team(team, games)
    if game is None:
        return PickResult(pick.pick_slot, team, None, None, None, PickOutcome.PENDING)

    spread = teased_spread(team, game, tease_points)
    if not _has_started(game):
        return PickResult(pick.pick_slot, team, game.id, spread, None, PickOutcome.PENDING)

    home_score = game.home_score or 0
    away_score = game.away_score or 0
    if team == game.home_team:
        team_score, opponent_score = home_score, away_score
    else:
        team_score, opponent_score = away_score, home_score

    margin = team_score + spread - opponent_score
    if margin > 0:
        outcome = PickOutcome.WINNING
    elif margin == 0 and tie_policy == TiePolicy.PUSH:
        outcome = PickOutcome.PUSH
    else:
        outcome = PickOutcome.LOSING
    return PickResult(pick.pick_slot, team, game.id, spread, margin, outcome)


def participant_status(results: Iterable[PickResult]) -> ParticipantStatus:
    results = list(results)
    evaluable = [r for r in results if r.outcome != PickOutcome.PENDING]
    if not evaluable:
        return ParticipantStatus.WAITING
    if any(r.outcome == PickOutcome.LOSING for r in evaluable):
        return ParticipantStatus.ELIMINATED
    return ParticipantStatus.ALIVE


def compute_live_standings(
    picks: Iterable[Any],
    games: Iterable[Any],
    participants: Iterable[Any],
    tease_points: float,
    tie_policy: TiePolicy = TiePolicy.LOSS,
    payout_unit: int = 5,
) -> LiveStandings:
    """Compute every participant's status and payout delta for one week.

    `picks` need participant_id, pick_slot and picked_team; `games` need
    id, home_team, away_team, spread, status and scores; `participants`
    need id and display_name. ORM rows and plain objects both work.
    """
    tie_policy = TiePolicy(tie_policy)
    games = list(games)

    picks_by_participant: dict[int, list[Any]] = defaultdict(list)
    for pick in picks:
        picks_by_participant[pick.participant_id].append(pick)

    evaluated: list[tuple[Any, ParticipantStatus, tuple[PickResult, ...]]] = []
    for participant in participants:
        own_picks = sorted(picks_by_participant.get(participant.id, []), key=lambda p: p.pick_slot)
        results = tuple(evaluate_pick(p, games, tease_points, tie_policy) for p in own_picks)
        evaluated.append((participant, participant_status(results), results))

    alive = sum(1 for _, status, _ in evaluated if status == ParticipantStatus.ALIVE)
    eliminated = sum(1 for _, status, _ in evaluated if status == ParticipantStatus.ELIMINATED)
    waiting = len(evaluated) - alive - eliminated

    standings = []
    for participant, status, results in evaluated:
        if status == ParticipantStatus.ALIVE:
            delta = payout_unit * eliminated
        elif status == ParticipantStatus.ELIMINATED:
            delta = -payout_unit * alive
        else:
            delta = 0
        standings.append(
            ParticipantStanding(
                participant_id=participant.id,
                display_name=getattr(participant, "display_name", None),
                status=status,
                picks=results,
                delta=delta,
            )
        )

    return LiveStandings(
        standings=tuple(standings),
        alive_count=alive,
        eliminated_count=eliminated,
        waiting_count=waiting,
        tease_points=tease_points,
        tie_policy=tie_policy,
    )
