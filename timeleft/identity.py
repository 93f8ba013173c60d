"""TIMELEFT identity: name, version and banner."""

__codename__ = "TIMELEFT"
__version__ = "0.39.0"
__tagline__ = "How long until it's done?"

BANNER = r"""
 _____ ___ __  __ _____ _     _____ _____ _____
|_   _|_ _|  \/  | ____| |   | ____|  ___|_   _|
  | |  | || |\/| |  _| | |   |  _| | |_    | |
  | |  | || |  | | |___| |___| |___|  _|   | |
  |_| |___|_|  |_|_____|_____|_____|_|     |_|
"""
