"""satnow: rank tracked satellites by distance from a ground observer."""

__version__ = "0.1.0"
