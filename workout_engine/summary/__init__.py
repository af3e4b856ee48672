"""Zone classification, natural-language descriptions and workout naming."""

from .description import describe_workout, goal_statement, metrics_suffix, short_description
from .naming import generate_workout_name, is_high_intensity, workout_category
from .zones import classify_zone, mean_relative_intensity, zone_for_intensity

__all__ = [
    "describe_workout",
    "goal_statement",
    "metrics_suffix",
    "short_description",
    "generate_workout_name",
    "is_high_intensity",
    "workout_category",
    "classify_zone",
    "mean_relative_intensity",
    "zone_for_intensity",
]
