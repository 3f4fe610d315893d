"""Persistence helpers for DMR parameter sets."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from deuce.db.models import RatingParameterSet
from deuce.rating.params import DMRParams

logger = logging.getLogger(__name__)

DEFAULT_PARAMS_VERSION = "defaults-v1"


def _load(record: RatingParameterSet) -> Optional[DMRParams]:
    try:
        return DMRParams.from_dict(record.params)
    except (TypeError, ValueError) as e:
        logger.warning("Ignoring unreadable rating parameter set '%s': %s", record.name, e)
        return None


def get_active_params(session: Session) -> tuple[DMRParams, str]:
    """Return active persisted DMR params, or defaults if none are active."""
    active = (
        session.query(RatingParameterSet)
        .filter(RatingParameterSet.is_active.is_(True))
        .order_by(RatingParameterSet.created_at.desc(), RatingParameterSet.id.desc())
        .first()
    )
    if not active:
        return DMRParams(), DEFAULT_PARAMS_VERSION

    params = _load(active)
    if params is None:
        return DMRParams(), DEFAULT_PARAMS_VERSION

    return params, active.name


def get_params_by_name(session: Session, name: str) -> tuple[DMRParams, str]:
    """
    Return a named parameter set whether or not it is active.

    Raises:
        LookupError: If no set has that name or it cannot be read
    """
    record = session.query(RatingParameterSet).filter(RatingParameterSet.name == name).first()
    if record is None:
        raise LookupError(f"No rating parameter set named '{name}'")

    params = _load(record)
    if params is None:
        raise LookupError(f"Rating parameter set '{name}' cannot be read")
    return params, record.name


def persist_params(
    session: Session,
    name: str,
    params: DMRParams,
    source: str = "manual",
    activate: bool = False,
) -> RatingParameterSet:
    """Persist a named DMR params set and optionally activate it."""
    if activate:
        session.query(RatingParameterSet).update({RatingParameterSet.is_active: False})

    record = RatingParameterSet(
        name=name,
        params=params.to_dict(),
        source=source,
        is_active=activate,
    )
    session.add(record)
    session.flush()
    logger.info("Stored rating parameter set '%s' (source=%s, active=%s)", name, source, activate)
    return record
