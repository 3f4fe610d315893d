"""
Deuce Match Rating (DMR) - racquet-sport skill ratings.

A Glicko-2 based rating engine for Pickleball, Tennis and Padel leagues.
Match confirmation workflows hand finished matches to the engine, which
validates the scores, updates each player's rating, rating deviation and
volatility, and keeps an auditable history of every change.

Main components:
- rating: Glicko-2 core, score validation, singles/doubles processors,
  inactivity adjustment and match reversal
- db: SQLAlchemy models and session management
- config: Environment-driven settings
"""

__version__ = "1.0.0"
