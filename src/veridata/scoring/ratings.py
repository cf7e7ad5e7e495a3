# src/veridata/scoring/ratings.py

import logging
from typing import Tuple

from veridata.errors import InvalidRatingError

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating) -> int:
    """
    Check a feedback rating is an integer within [MIN_RATING, MAX_RATING].

    Raises:
        InvalidRatingError: If the rating is not an int or out of range
    """
    # bool is an int subclass
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(f"Rating must be an integer, got {rating!r}")
    if not (MIN_RATING <= rating <= MAX_RATING):
        raise InvalidRatingError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}"
        )
    return rating


class RatingAggregator:
    """
    Maintains the running average rating of a data source.

    The average is stored as an integer and every update floors, so callers
    get no fractional precision. The first rating becomes the average exactly.
    """

    @staticmethod
    def update(old_average: int, old_count: int, new_rating: int) -> Tuple[int, int]:
        """
        Fold one rating into an existing average.

        Args:
            old_average: Current truncated average
            old_count: Number of ratings folded in so far
            new_rating: Rating being added

        Returns:
            Tuple of (new_average, new_count).
        """
        if old_count < 0 or old_average < 0:
            raise ValueError("Existing rating stats must be non-negative")
        new_count = old_count + 1
        new_average = (old_average * old_count + new_rating) // new_count
        return new_average, new_count

    def apply(self, record: "DataSourceRecord", rating: int) -> "DataSourceRecord":
        """Return a copy of ``record`` with average and count updated together."""
        rating = validate_rating(rating)
        new_average, new_count = self.update(
            record.average_rating, record.rating_count, rating
        )
        return record.model_copy(
            update={"average_rating": new_average, "rating_count": new_count}
        )
