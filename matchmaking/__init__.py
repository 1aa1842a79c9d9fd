"""
Client-property matchmaking engine.
Deterministic, rule-based compatibility scoring and dashboard analytics.
"""

__version__ = "1.0.0"
