"""Tests for team name normalization."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from teaser_pool.normalization import (
    CANONICAL_CODES,
    NFL_TEAMS,
    normalize,
    normalize_team_code,
)


class TestNormalizeTeamCode:
    def test_full_name_maps_to_code(self):
        result = normalize_team_code("Kansas City Chiefs")
        assert result.code == "KC"
        assert result.known is True

    def test_lookup_is_case_and_whitespace_insensitive(self):
        assert normalize("  kansas   city CHIEFS ") == "KC"

    def test_short_code_is_uppercased(self):
        result = normalize_team_code("sf")
        assert result.code == "SF"
        assert result.known is True

    def test_short_unknown_code_is_flagged(self):
        result = normalize_team_code("XYZ")
        assert result.code == "XYZ"
        assert result.known is False

    def test_unknown_name_returned_unchanged_and_logged(self):
        with patch("teaser_pool.normalization.logger") as mock_logger:
            result = normalize_team_code("London Monarchs")
        assert result.code == "London Monarchs"
        assert result.known is False
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args[0][0] == "team_name_unmapped"

    def test_none_never_raises(self):
        assert normalize(None) == ""

    def test_non_string_never_raises(self):
        result = normalize_team_code(12)
        assert result.code == "12"
        assert result.known is False

    def test_padded_code_is_stripped(self):
        result = normalize_team_code(" KC")
        assert result.code == "KC"
        assert result.known is True

    def test_str_of_team_code_is_code(self):
        assert str(normalize_team_code("Green Bay Packers")) == "GB"


class TestFranchiseTable:
    def test_has_32_franchises(self):
        assert len(NFL_TEAMS) == 32
        assert len(CANONICAL_CODES) == 32

    def test_every_canonical_name_resolves(self):
        for canonical, code, _ in NFL_TEAMS.values():
            assert normalize(canonical) == code


@pytest.mark.parametrize(
    "raw",
    ["KC", "kc", "Las Vegas Raiders", "Washington Commanders", "Unknown Club", "", "ny"],
)
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once
