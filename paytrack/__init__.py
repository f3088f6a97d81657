"""
PayTrack - Source Package

The core of a personal payment tracker: recurring and one-time payments,
a rolling monthly period with a configurable start day, a per-period
account balance and a forecast of the end-of-period balance.

DESIGN PRINCIPLES:
1. Period and forecast math are pure functions
2. Stores own their collections and announce every write
3. Configuration is passed in, never read from globals
4. Storage backend is swappable
"""

__version__ = "1.0.0"
__author__ = "PayTrack Team"
