"""
Unit tests for DMR parameters and persisted parameter sets.
"""

import pytest

from deuce.db.models import RatingParameterSet
from deuce.rating.params import DMRParams
from deuce.rating.params_store import (
    DEFAULT_PARAMS_VERSION,
    get_active_params,
    get_params_by_name,
    persist_params,
)


class TestDMRParams:
    """Tests for the parameter bundle itself."""

    def test_defaults(self):
        params = DMRParams()
        assert params.tau == 0.5
        assert params.cap_k == 0.08
        assert params.abs_max_delta == 75.0
        assert (params.min_rd, params.max_rd) == (30.0, 350.0)
        assert params.inactivity_threshold_days == 30

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DMRParams().tau = 0.3

    def test_with_overrides(self):
        params = DMRParams().with_overrides(cap_k=0.1, dampening=0.8)
        assert (params.cap_k, params.dampening) == (0.1, 0.8)
        assert DMRParams().cap_k == 0.08

    def test_dict_round_trip(self):
        params = DMRParams(tau=0.4, score_factor_soften=False)
        assert DMRParams.from_dict(params.to_dict()) == params

    def test_unknown_key_rejected(self):
        with pytest.raises(TypeError, match="k_factor"):
            DMRParams.from_dict({"k_factor": 32})

    @pytest.mark.parametrize(
        "overrides",
        [{"tau": 0}, {"min_rd": 400}, {"min_rd": 0}, {"default_volatility": 0}, {"inactivity_threshold_days": 0}],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            DMRParams(**overrides)

    def test_clamp_rd(self):
        params = DMRParams()
        assert params.clamp_rd(10) == 30.0
        assert params.clamp_rd(500) == 350.0
        assert params.clamp_rd(120) == 120


class TestParamsStore:
    """Tests for get_active_params() and persist_params()."""

    def test_defaults_when_nothing_stored(self, db_session):
        params, version = get_active_params(db_session)
        assert params == DMRParams()
        assert version == DEFAULT_PARAMS_VERSION == "defaults-v1"

    def test_inactive_set_ignored(self, db_session):
        persist_params(db_session, "tuned", DMRParams(cap_k=0.1))
        db_session.commit()

        assert get_active_params(db_session)[1] == DEFAULT_PARAMS_VERSION

    def test_activate(self, db_session):
        persist_params(db_session, "tuned", DMRParams(cap_k=0.1), source="optimiser", activate=True)
        db_session.commit()

        params, version = get_active_params(db_session)
        assert params.cap_k == 0.1
        assert version == "tuned"

    def test_activation_deactivates_others(self, db_session):
        persist_params(db_session, "v1", DMRParams(cap_k=0.1), activate=True)
        persist_params(db_session, "v2", DMRParams(cap_k=0.12), activate=True)
        db_session.commit()

        active = db_session.query(RatingParameterSet).filter(RatingParameterSet.is_active.is_(True)).all()
        assert [r.name for r in active] == ["v2"]
        assert get_active_params(db_session)[0].cap_k == 0.12

    def test_unreadable_set_falls_back(self, db_session, caplog):
        db_session.add(RatingParameterSet(name="broken", params={"k_factor": 32}, is_active=True))
        db_session.commit()

        with caplog.at_level("WARNING"):
            params, version = get_active_params(db_session)

        assert params == DMRParams()
        assert version == DEFAULT_PARAMS_VERSION
        assert "broken" in caplog.text

    def test_by_name(self, db_session):
        persist_params(db_session, "experiment", DMRParams(dampening=0.9))
        db_session.commit()

        params, version = get_params_by_name(db_session, "experiment")
        assert params.dampening == 0.9
        assert version == "experiment"

    def test_by_name_missing(self, db_session):
        with pytest.raises(LookupError):
            get_params_by_name(db_session, "nope")
