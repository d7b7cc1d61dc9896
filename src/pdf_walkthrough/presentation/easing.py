"""Easing curves and interpolation helpers for keyframe playback."""

import math
from typing import Callable

EasingFunction = Callable[[float], float]


def linear(t: float) -> float:
    return t


def ease_in_quad(t: float) -> float:
    return t * t


def ease_out_quad(t: float) -> float:
    return 1 - (1 - t) ** 2


def ease_in_out_quad(t: float) -> float:
    return 2 * t * t if t < 0.5 else 1 - (-2 * t + 2) ** 2 / 2


def ease_in_cubic(t: float) -> float:
    return t * t * t


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def ease_in_out_cubic(t: float) -> float:
    return 4 * t * t * t if t < 0.5 else 1 - (-2 * t + 2) ** 3 / 2


def ease_in_quart(t: float) -> float:
    return t**4


def ease_out_quart(t: float) -> float:
    return 1 - (1 - t) ** 4


def ease_in_out_quart(t: float) -> float:
    return 8 * t**4 if t < 0.5 else 1 - (-2 * t + 2) ** 4 / 2


EASINGS: dict[str, EasingFunction] = {
    "linear": linear,
    "ease_in": ease_in_quad,
    "ease_out": ease_out_quad,
    "ease_in_out": ease_in_out_quad,
    "ease_in_cubic": ease_in_cubic,
    "ease_out_cubic": ease_out_cubic,
    "ease_in_out_cubic": ease_in_out_cubic,
    "ease_in_quart": ease_in_quart,
    "ease_out_quart": ease_out_quart,
    "ease_in_out_quart": ease_in_out_quart,
}


def get_easing(name: str) -> EasingFunction:
    """Look up an easing function by name.

    Raises:
        ValueError: If the name is not registered.
    """
    try:
        return EASINGS[name]
    except KeyError:
        raise ValueError(
            f"unknown easing {name!r}; expected one of {sorted(EASINGS)}"
        ) from None


def lerp(start: float, end: float, progress: float) -> float:
    return start + (end - start) * progress


def lerp_eased(
    start: float, end: float, progress: float, easing: str = "ease_in_out_cubic"
) -> float:
    """Interpolate with an easing curve; progress is clamped to [0, 1]."""
    progress = min(1.0, max(0.0, progress))
    return lerp(start, end, get_easing(easing)(progress))


def seconds_to_frames(seconds: float, fps: int) -> int:
    # Epsilon absorbs float drift, e.g. 0.1 * 3 at 10 fps is frame 3
    return int(math.floor(seconds * fps + 1e-9))


def frames_to_seconds(frames: int, fps: int) -> float:
    return frames / fps
