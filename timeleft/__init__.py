"""TIMELEFT: remaining-time estimate for a single linear task."""

from timeleft.identity import __version__  # noqa: F401
