"""Jelli Fit API - shared availability scheduling"""

__version__ = "2.0.0"
