"""Mapping from the single mood control to shape styling parameters.

Mood runs from 0 (Structured: sharp contrast, small defined shapes) to
100 (Organic: fluid gradients, large soft shapes). Every field of
MoodSettings is linear in mood except the smoothing iteration count,
which is stepped.
"""
import math

from meshgrad.types import MoodSettings

MOOD_MIN = 0.0
MOOD_MAX = 100.0

_LABELS = (
    (20, "Structured", "Sharp contrast, defined shapes"),
    (40, "Graphic", "Clear boundaries, graphic feel"),
    (60, "Balanced", "Natural blend of detail and flow"),
    (80, "Smooth", "Soft transitions, gentle curves"),
)
_LAST_LABEL = ("Organic", "Fluid gradients, minimal edges")


def clamp_mood(mood: float) -> float:
    return min(MOOD_MAX, max(MOOD_MIN, float(mood)))


def mood_to_settings(mood: float) -> MoodSettings:
    """
    Map mood (0-100) to styling settings.

    Smoothing is forced to at least one Chaikin pass and overlap starts
    above 1 so that neighbouring shapes still overlap after rounding.
    """
    t = clamp_mood(mood) / 100.0
    return MoodSettings(
        path_smoothing=max(1, int(math.floor(t * 4))),  # 1 -> 4
        overlap_amount=1.06 + t * 0.12,                 # 1.06 -> 1.18
        shape_opacity=0.97 - t * 0.3,                   # 0.97 -> 0.67
        adaptive_sensitivity=0.25 + t * 0.45,           # 0.25 -> 0.70
        min_shape_scale=0.8 + t * 0.4,                  # 0.8 -> 1.2
        merge_threshold=0.15 + t * 0.35,                # 0.15 -> 0.50
        gradient_consistency=0.35 + t * 0.55,           # 0.35 -> 0.90
        base_gradient_opacity=0.25 + t * 0.55,          # 0.25 -> 0.80
    )


def mood_to_min_distance(mood: float, width: int, height: int, floor: float = 24.0) -> float:
    """
    Base Poisson-disk spacing for a mood.

    Spacing is 3.5% to 14.5% of the shorter image side, never below ``floor``
    pixels so that tiny images do not turn into micro triangles.
    """
    factor = 0.035 + (clamp_mood(mood) / 100.0) * 0.11
    return max(min(width, height) * factor, floor)


def mood_label(mood: float) -> str:
    mood = clamp_mood(mood)
    for limit, label, _ in _LABELS:
        if mood < limit:
            return label
    return _LAST_LABEL[0]


def mood_description(mood: float) -> str:
    mood = clamp_mood(mood)
    for limit, _, description in _LABELS:
        if mood < limit:
            return description
    return _LAST_LABEL[1]
