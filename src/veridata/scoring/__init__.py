# src/veridata/scoring/__init__.py

"""
Scoring for VeriData.
Reputation-weighted rewards and running-average feedback ratings.
"""

from .rewards import RewardCalculator
from .ratings import RatingAggregator, validate_rating, MIN_RATING, MAX_RATING

__all__ = [
    "RewardCalculator",
    "RatingAggregator",
    "validate_rating",
    "MIN_RATING",
    "MAX_RATING",
]
