"""Keyframe timeline construction from aligned narration steps.

Each step gets four keyframes: enter (page at rest, transparent), focus
(zoomed onto the highlight), hold (same transform until the step ends) and
exit (back to rest). Steps never overlap; a fixed pause separates them.
"""

import math
import time

from ..logger import logger
from .config import PipelineConfig
from .easing import get_easing, lerp, seconds_to_frames
from .models import (
    AlignedHighlight,
    CanonicalBox,
    Keyframe,
    NarrationStep,
    TimelineEntry,
    Viewport,
)


def clamp_zoom(zoom: float, min_zoom: float, max_zoom: float) -> float:
    if not math.isfinite(zoom):
        return max_zoom if zoom > 0 else min_zoom
    return min(max_zoom, max(min_zoom, zoom))


def optimal_zoom(
    box: CanonicalBox,
    viewport: Viewport,
    target_fill_ratio: float = 0.6,
    min_zoom: float = 1.0,
    max_zoom: float = 3.0,
) -> float:
    """Zoom that makes the box fill ``target_fill_ratio`` of the viewport.

    The limiting axis is whichever is relatively larger. Zero-area boxes get
    ``max_zoom``.
    """
    if box.width <= 0 or box.height <= 0:
        return max_zoom
    zoom = min(
        viewport.width * target_fill_ratio / box.width,
        viewport.height * target_fill_ratio / box.height,
    )
    return clamp_zoom(zoom, min_zoom, max_zoom)


def center_on(box: CanonicalBox, viewport: Viewport, zoom: float) -> tuple[float, float]:
    """Pan offset that puts the box centre at the viewport centre.

    Pan is applied inside the scaled coordinate space, hence the zoom factor.
    """
    pan_x = (viewport.width / 2 - box.center_x) * zoom
    pan_y = (viewport.height / 2 - box.center_y) * zoom
    return pan_x, pan_y


def _resolve_durations(durations: list[float], config: PipelineConfig) -> list[float]:
    resolved = []
    for index, duration in enumerate(durations):
        if duration is None or not math.isfinite(duration) or duration <= 0:
            logger.warn(
                "invalid step duration replaced with default",
                step_index=index,
                duration=duration,
                default=config.default_step_duration,
            )
            resolved.append(config.default_step_duration)
        else:
            resolved.append(float(duration))
    return resolved


def build_timeline(
    highlights: list[AlignedHighlight],
    durations: list[float],
    fps: int | None = None,
    config: PipelineConfig | None = None,
    steps: list[NarrationStep] | None = None,
) -> list[TimelineEntry]:
    """Turn aligned highlights into a non-overlapping keyframe timeline.

    Args:
        highlights: One aligned highlight per step, in step order.
        durations: Narration audio length per step, in seconds.
        fps: Frame rate for the frame indices; defaults to ``config.fps``.
        config: Viewport, zoom bounds, pause and easing defaults.
        steps: Optional narration steps carrying per-step zoom, highlight
            type and easing overrides, aligned by index with highlights.

    Returns:
        One TimelineEntry per highlight.

    Raises:
        ValueError: If durations or steps do not line up with highlights, or
            a step names an unknown easing.
    """
    config = config or PipelineConfig()
    fps = fps or config.fps
    if len(durations) != len(highlights):
        raise ValueError(
            f"durations length ({len(durations)}) must match highlights length ({len(highlights)})"
        )
    if steps is not None and len(steps) != len(highlights):
        raise ValueError(
            f"steps length ({len(steps)}) must match highlights length ({len(highlights)})"
        )

    start = time.perf_counter()
    viewport = config.viewport
    resolved = _resolve_durations(durations, config)

    entries: list[TimelineEntry] = []
    cursor = 0.0
    for index, (highlight, duration) in enumerate(zip(highlights, resolved)):
        step = steps[index] if steps is not None else None

        start_time = cursor
        end_time = start_time + duration
        transition = min(config.transition_duration, duration / 2)

        if step is not None and step.zoom_level is not None:
            zoom = clamp_zoom(step.zoom_level, config.min_zoom, config.max_zoom)
        else:
            zoom = optimal_zoom(
                highlight.box,
                viewport,
                config.target_fill_ratio,
                config.min_zoom,
                config.max_zoom,
            )
        pan_x, pan_y = center_on(highlight.box, viewport, zoom)

        easing = step.easing if step and step.easing else config.default_easing
        get_easing(easing)  # raises on unknown names
        highlight_type = (
            step.highlight_type
            if step and step.highlight_type
            else config.default_highlight_type
        )

        keyframes = [
            Keyframe(time_seconds=start_time, zoom=1.0, pan_x=0.0, pan_y=0.0, opacity=0.0),
            Keyframe(
                time_seconds=start_time + transition,
                zoom=zoom,
                pan_x=pan_x,
                pan_y=pan_y,
                opacity=1.0,
            ),
            Keyframe(
                time_seconds=end_time - transition,
                zoom=zoom,
                pan_x=pan_x,
                pan_y=pan_y,
                opacity=1.0,
            ),
            Keyframe(time_seconds=end_time, zoom=1.0, pan_x=0.0, pan_y=0.0, opacity=0.0),
        ]

        entries.append(
            TimelineEntry(
                step_index=index,
                step_number=highlight.step,
                start_time=start_time,
                end_time=end_time,
                start_frame=seconds_to_frames(start_time, fps),
                end_frame=seconds_to_frames(end_time, fps),
                keyframes=keyframes,
                highlight_type=highlight_type,
                easing=easing,
                caption=step.narrative if step is not None else highlight.narrative,
                box=highlight.box,
                needs_review=highlight.needs_review,
            )
        )
        cursor = end_time + config.step_pause

    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "timeline built",
        entries=len(entries),
        total_duration=round(timeline_duration(entries), 3),
        fps=fps,
        duration_ms=round(duration_ms, 2),
    )
    return entries


def timeline_duration(entries: list[TimelineEntry]) -> float:
    """Seconds from zero to the end of the last step."""
    return entries[-1].end_time if entries else 0.0


def sample_at(entries: list[TimelineEntry], time_seconds: float) -> Keyframe:
    """Interpolated viewport transform at a playback time.

    Outside every step (pauses, before zero, after the end) the page is at
    rest: zoom 1, no pan, highlight transparent.
    """
    rest = Keyframe(time_seconds=time_seconds, zoom=1.0, pan_x=0.0, pan_y=0.0, opacity=0.0)
    for entry in entries:
        if not entry.start_time <= time_seconds <= entry.end_time:
            continue
        ease = get_easing(entry.easing)
        frames = entry.keyframes
        for current, following in zip(frames, frames[1:]):
            if current.time_seconds <= time_seconds <= following.time_seconds:
                span = following.time_seconds - current.time_seconds
                progress = ease((time_seconds - current.time_seconds) / span) if span > 0 else 1.0
                return Keyframe(
                    time_seconds=time_seconds,
                    zoom=lerp(current.zoom, following.zoom, progress),
                    pan_x=lerp(current.pan_x, following.pan_x, progress),
                    pan_y=lerp(current.pan_y, following.pan_y, progress),
                    opacity=lerp(current.opacity, following.opacity, progress),
                )
    return rest
