"""
Unit tests for match reversal.
"""

from datetime import datetime

from deuce.db.models import RatingHistory
from deuce.rating.constants import REVERSED_MARKER
from deuce.rating.types import DoublesMatchInput, SetScore, SinglesMatchInput
from deuce.sports import DOUBLES, SINGLES

SEASON = "2026-fall"


def play_singles(service, match_id, winner="alice", loser="bob"):
    return service.process_singles_match(
        SinglesMatchInput(
            winner_id=winner,
            loser_id=loser,
            set_scores=[SetScore(11, 5), SetScore(11, 7)],
            season_id=SEASON,
            match_id=match_id,
        )
    )


class TestReversal:
    """Tests for reverse_match_ratings()."""

    def test_restores_singles(self, service):
        """Process then reverse restores rating, RD and matches played."""
        play_singles(service, "m1")

        assert service.reverse_match_ratings("m1") == 2

        for player_id in ("alice", "bob"):
            rating = service.get_player_rating(player_id, SEASON, SINGLES)
            assert rating.rating == 1500
            assert rating.rating_deviation == 350
            assert rating.matches_played == 0
            assert rating.is_provisional is True

    def test_restores_existing_player(self, service, make_rating):
        make_rating("alice", rating=1620, rd=90, matches_played=12)
        play_singles(service, "m1")

        service.reverse_match_ratings("m1")

        alice = service.get_player_rating("alice", SEASON, SINGLES)
        assert alice.rating == 1620
        assert alice.rating_deviation == 90
        assert alice.matches_played == 12
        assert alice.is_provisional is False

    def test_restores_doubles(self, service):
        service.process_doubles_match(
            DoublesMatchInput(
                team1_ids=["a1", "a2"],
                team2_ids=["b1", "b2"],
                set_scores=[SetScore(11, 3), SetScore(11, 4)],
                season_id=SEASON,
                match_id="d1",
            )
        )

        assert service.reverse_match_ratings("d1") == 4
        for player_id in ("a1", "a2", "b1", "b2"):
            rating = service.get_player_rating(player_id, SEASON, DOUBLES)
            assert (rating.rating, rating.rating_deviation, rating.matches_played) == (1500, 350, 0)

    def test_only_that_match(self, service):
        play_singles(service, "m1")
        after_first = service.get_player_rating("alice", SEASON, SINGLES).rating
        play_singles(service, "m2", winner="carol", loser="dave")

        service.reverse_match_ratings("m2")

        assert service.get_player_rating("alice", SEASON, SINGLES).rating == after_first
        assert service.get_player_rating("carol", SEASON, SINGLES).rating == 1500

    def test_sets_last_updated(self, service):
        play_singles(service, "m1")
        now = datetime(2026, 10, 19, 8, 0)

        service.reverse_match_ratings("m1", now=now)

        assert service.get_player_rating("alice", SEASON, SINGLES).last_updated_at == now

    def test_history_annotated_not_deleted(self, service, session_factory):
        play_singles(service, "m1")
        service.reverse_match_ratings("m1")

        with session_factory() as session:
            rows = session.query(RatingHistory).filter(RatingHistory.match_id == "m1").all()
        assert len(rows) == 2
        assert all(REVERSED_MARKER in row.notes for row in rows)

    def test_double_reversal_is_noop(self, service, caplog):
        play_singles(service, "m1")
        service.reverse_match_ratings("m1")

        with caplog.at_level("WARNING"):
            assert service.reverse_match_ratings("m1") == 0
        assert "No rating history to reverse" in caplog.text

        assert service.get_player_rating("alice", SEASON, SINGLES).matches_played == 0

    def test_unknown_match(self, service, caplog):
        with caplog.at_level("WARNING"):
            assert service.reverse_match_ratings("missing") == 0
        assert "missing" in caplog.text
