"""Exceptions raised by the DMR rating engine."""


class DMRError(Exception):
    """Base class for rating engine errors."""


class InvalidMatchDataError(DMRError):
    """
    The match cannot be rated as submitted.

    Raised for bad or missing scores, self-play, duplicate doubles players,
    or a declared winner who did not win more sets. Always fixable by the
    caller; never worth retrying.
    """


class PlayerNotFoundError(DMRError):
    """No rating exists for a lookup that does not create one."""
