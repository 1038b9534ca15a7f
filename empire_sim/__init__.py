"""Empire simulation core - events, raids, combat and autonomous governors."""

__version__ = "0.1.0"
