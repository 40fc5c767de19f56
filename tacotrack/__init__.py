"""TacoTrack restaurant inventory and ordering dashboard"""

__version__ = "1.0.0"
