"""Coordinate normalization from analysis polygons to viewport pixels."""

import math

from ..logger import logger
from .models import BoundingRegion, CanonicalBox, Element, PageDimensions, Viewport

POINTS_PER_INCH = 72.0
MIN_POLYGON_POINTS = 4


def detect_unit(region: BoundingRegion) -> str:
    """Return the region's unit, detecting it when undeclared.

    All coordinates <= 1.0 are fractions of the page; anything larger is
    taken to be inches.
    """
    if region.unit is not None:
        return region.unit
    max_value = max(max(p.x, p.y) for p in region.polygon)
    return "normalized" if max_value <= 1.0 else "inches"


def _polygon_bounds(region: BoundingRegion) -> tuple[float, float, float, float]:
    xs = [p.x for p in region.polygon]
    ys = [p.y for p in region.polygon]
    return min(xs), min(ys), max(xs), max(ys)


def is_malformed(region: BoundingRegion | None) -> bool:
    """True for a region that cannot produce a box."""
    if region is None or len(region.polygon) < MIN_POLYGON_POINTS:
        return True
    return not all(math.isfinite(p.x) and math.isfinite(p.y) for p in region.polygon)


def normalize(
    region: BoundingRegion | None,
    page: PageDimensions,
    viewport: Viewport,
    scale: float = 1.0,
) -> CanonicalBox | None:
    """Convert a bounding region to a box in viewport pixels.

    The region is assumed to use a top-left origin; bottom-left sources are
    flipped by the caller before this point. The result is truncated to the
    viewport rather than shifted into it.

    Args:
        region: Raw polygon from the analysis service.
        page: Page size in points.
        viewport: Target surface in pixels.
        scale: Pixels per point.

    Returns:
        The canonical box, or None if the region is malformed.
    """
    if is_malformed(region):
        return None

    min_x, min_y, max_x, max_y = _polygon_bounds(region)
    unit = detect_unit(region)

    if unit == "normalized":
        x0, x1 = min_x * page.width, max_x * page.width
        y0, y1 = min_y * page.height, max_y * page.height
    elif unit == "inches":
        x0, x1 = min_x * POINTS_PER_INCH, max_x * POINTS_PER_INCH
        y0, y1 = min_y * POINTS_PER_INCH, max_y * POINTS_PER_INCH
    else:  # points
        x0, x1, y0, y1 = min_x, max_x, min_y, max_y

    x0, x1, y0, y1 = x0 * scale, x1 * scale, y0 * scale, y1 * scale

    clamped_x0 = min(max(x0, 0.0), viewport.width)
    clamped_y0 = min(max(y0, 0.0), viewport.height)
    clamped_x1 = min(max(x1, 0.0), viewport.width)
    clamped_y1 = min(max(y1, 0.0), viewport.height)

    return CanonicalBox(
        x=clamped_x0,
        y=clamped_y0,
        width=max(0.0, clamped_x1 - clamped_x0),
        height=max(0.0, clamped_y1 - clamped_y0),
    )


def denormalize(
    box: CanonicalBox, page: PageDimensions, unit: str, scale: float = 1.0
) -> tuple[float, float, float, float]:
    """Map a box back to (min_x, min_y, max_x, max_y) in the given unit.

    Inverse of ``normalize`` for boxes that were not clamped.
    """
    x0, y0 = box.x / scale, box.y / scale
    x1, y1 = box.right / scale, box.bottom / scale
    if unit == "normalized":
        return x0 / page.width, y0 / page.height, x1 / page.width, y1 / page.height
    if unit == "inches":
        return (
            x0 / POINTS_PER_INCH,
            y0 / POINTS_PER_INCH,
            x1 / POINTS_PER_INCH,
            y1 / POINTS_PER_INCH,
        )
    return x0, y0, x1, y1


def normalize_elements(
    elements: list[Element],
    pages: list[PageDimensions],
    viewport: Viewport,
    scale: float = 1.0,
) -> tuple[dict[str, CanonicalBox], list[str]]:
    """Build the per-run element-id -> box map from each primary region.

    Returns:
        Tuple of (boxes, malformed element ids). Elements with a malformed
        primary region, or on a page with no known size, are left out of
        the map.
    """
    page_by_number = {p.page_number: p for p in pages}
    boxes: dict[str, CanonicalBox] = {}
    malformed: list[str] = []

    for element in elements:
        region = element.primary_region
        page = page_by_number.get(region.page_number) if region else None
        box = normalize(region, page, viewport, scale) if page else None
        if box is None:
            malformed.append(element.element_id)
            logger.warn(
                "dropping element with unusable region",
                element_id=element.element_id,
                kind=element.kind,
                has_region=region is not None,
                has_page=page is not None,
            )
            continue
        boxes[element.element_id] = box

    logger.debug(
        "elements normalized",
        total_elements=len(elements),
        normalized=len(boxes),
        malformed=len(malformed),
    )
    return boxes, malformed
