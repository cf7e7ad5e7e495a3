# src/veridata/scoring/rewards.py

import logging

logger = logging.getLogger(__name__)

DEFAULT_BASE_REWARD = 100
DEFAULT_PER_TIER_BONUS = 10
DEFAULT_TIER_SIZE = 10


class RewardCalculator:
    """
    Maps a verifier's reputation to the token reward paid for a verification.

    reward = base_reward + (reputation // tier_size) * per_tier_bonus
    """

    def __init__(
        self,
        base_reward: int = DEFAULT_BASE_REWARD,
        per_tier_bonus: int = DEFAULT_PER_TIER_BONUS,
        tier_size: int = DEFAULT_TIER_SIZE,
    ):
        """
        Initialize calculator with configurable parameters.

        Args:
            base_reward: Tokens paid regardless of reputation
            per_tier_bonus: Extra tokens per completed reputation tier
            tier_size: Reputation points per tier
        """
        if base_reward < 0 or per_tier_bonus < 0:
            raise ValueError("Reward parameters must be non-negative")
        if tier_size <= 0:
            raise ValueError("tier_size must be positive")
        self.base_reward = base_reward
        self.per_tier_bonus = per_tier_bonus
        self.tier_size = tier_size

    def compute(self, reputation: int) -> int:
        if reputation < 0:
            raise ValueError("Reputation must be non-negative")
        return self.base_reward + (reputation // self.tier_size) * self.per_tier_bonus
