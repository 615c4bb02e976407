"""Team name normalization for matching across the schedule and odds feeds.

The canonical code is the ESPN abbreviation; it is the join key between
schedule events, odds entries and picks.
"""

from __future__ import annotations

import re

from ..logging import logger
from ..models import TeamCode

# Canonical franchise data: (canonical_name, code, common_variations)
NFL_TEAMS = {
    "Arizona Cardinals": ("Arizona Cardinals", "ARI", ["Arizona", "Cardinals"]),
    "Atlanta Falcons": ("Atlanta Falcons", "ATL", ["Atlanta", "Falcons"]),
    "Baltimore Ravens": ("Baltimore Ravens", "BAL", ["Baltimore", "Ravens"]),
    "Buffalo Bills": ("Buffalo Bills", "BUF", ["Buffalo", "Bills"]),
    "Carolina Panthers": ("Carolina Panthers", "CAR", ["Carolina", "Panthers"]),
    "Chicago Bears": ("Chicago Bears", "CHI", ["Chicago", "Bears"]),
    "Cincinnati Bengals": ("Cincinnati Bengals", "CIN", ["Cincinnati", "Bengals"]),
    "Cleveland Browns": ("Cleveland Browns", "CLE", ["Cleveland", "Browns"]),
    "Dallas Cowboys": ("Dallas Cowboys", "DAL", ["Dallas", "Cowboys"]),
    "Denver Broncos": ("Denver Broncos", "DEN", ["Denver", "Broncos"]),
    "Detroit Lions": ("Detroit Lions", "DET", ["Detroit", "Lions"]),
    "Green Bay Packers": ("Green Bay Packers", "GB", ["Green Bay", "Packers"]),
    "Houston Texans": ("Houston Texans", "HOU", ["Houston", "Texans"]),
    "Indianapolis Colts": ("Indianapolis Colts", "IND", ["Indianapolis", "Colts"]),
    "Jacksonville Jaguars": ("Jacksonville Jaguars", "JAX", ["Jacksonville", "Jaguars"]),
    "Kansas City Chiefs": ("Kansas City Chiefs", "KC", ["Kansas City", "Chiefs"]),
    "Las Vegas Raiders": ("Las Vegas Raiders", "LV", ["Las Vegas", "Raiders", "Oakland Raiders"]),
    "Los Angeles Chargers": ("Los Angeles Chargers", "LAC", ["LA Chargers", "L.A. Chargers", "Chargers"]),
    "Los Angeles Rams": ("Los Angeles Rams", "LAR", ["LA Rams", "L.A. Rams", "Rams"]),
    "Miami Dolphins": ("Miami Dolphins", "MIA", ["Miami", "Dolphins"]),
    "Minnesota Vikings": ("Minnesota Vikings", "MIN", ["Minnesota", "Vikings"]),
    "New England Patriots": ("New England Patriots", "NE", ["New England", "Patriots"]),
    "New Orleans Saints": ("New Orleans Saints", "NO", ["New Orleans", "Saints"]),
    "New York Giants": ("New York Giants", "NYG", ["NY Giants", "Giants"]),
    "New York Jets": ("New York Jets", "NYJ", ["NY Jets", "Jets"]),
    "Philadelphia Eagles": ("Philadelphia Eagles", "PHI", ["Philadelphia", "Eagles"]),
    "Pittsburgh Steelers": ("Pittsburgh Steelers", "PIT", ["Pittsburgh", "Steelers"]),
    "San Francisco 49ers": ("San Francisco 49ers", "SF", ["San Francisco", "49ers"]),
    "Seattle Seahawks": ("Seattle Seahawks", "SEA", ["Seattle", "Seahawks"]),
    "Tampa Bay Buccaneers": ("Tampa Bay Buccaneers", "TB", ["Tampa Bay", "Buccaneers"]),
    "Tennessee Titans": ("Tennessee Titans", "TEN", ["Tennessee", "Titans"]),
    "Washington Commanders": ("Washington Commanders", "WSH", ["Washington", "Commanders", "Washington Football Team"]),
}

# Lookup: normalized variation -> code
TEAM_MAPPINGS: dict[str, str] = {}
for _canonical, _code, _variations in NFL_TEAMS.values():
    TEAM_MAPPINGS[_canonical.lower()] = _code
    for _variation in _variations:
        TEAM_MAPPINGS[_variation.lower()] = _code

CANONICAL_CODES = frozenset(code for _, code, _ in NFL_TEAMS.values())


def _normalize_string(s: str) -> str:
    """Collapse whitespace and lowercase for lookup."""
    return re.sub(r"\s+", " ", s.strip().lower())


def normalize_team_code(raw: str) -> TeamCode:
    """Map an external team identifier to its canonical code.

    Identifiers of three characters or fewer are treated as codes already
    and only uppercased. Longer names go through the franchise table; a
    miss is logged and the raw value is forwarded unchanged as an unknown
    code. Never raises.
    """
    raw = str(raw if raw is not None else "").strip()
    if len(raw) <= 3:
        code = raw.upper()
        return TeamCode(code=code, known=code in CANONICAL_CODES)

    code = TEAM_MAPPINGS.get(_normalize_string(raw))
    if code is None:
        logger.warning("team_name_unmapped", raw=raw)
        return TeamCode(code=raw, known=False)
    return TeamCode(code=code)


def normalize(raw: str) -> str:
    """String form of normalize_team_code."""
    return normalize_team_code(raw).code


__all__ = ["CANONICAL_CODES", "NFL_TEAMS", "TEAM_MAPPINGS", "normalize", "normalize_team_code"]
