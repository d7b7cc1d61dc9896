"""Adapter from the document-analysis result shape to pipeline elements."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..logger import logger
from .coordinates import POINTS_PER_INCH, detect_unit, is_malformed
from .models import (
    BoundingRegion,
    Element,
    KeyValuePairElement,
    PageDimensions,
    ParagraphElement,
    Point,
    TableCellElement,
    TableElement,
)

# Page unit strings as emitted by the analysis service -> region unit
_PAGE_UNITS = {
    "inch": "inches",
    "inches": "inches",
    "point": "points",
    "points": "points",
    # Image pages: region values share the page's pixel space
    "pixel": "points",
    "pixels": "points",
    "normalized": "normalized",
}


class InvalidAnalysisResultError(ValueError):
    """Raised when an analysis result has nothing the pipeline can present."""

    pass


class _RawModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RawRegion(_RawModel):
    page_number: int = Field(default=1, alias="pageNumber")
    polygon: list[Any] = Field(default_factory=list)


class RawPage(_RawModel):
    page_number: int = Field(default=1, alias="pageNumber")
    width: float = 0.0
    height: float = 0.0
    unit: str | None = None


class RawParagraph(_RawModel):
    content: str = ""
    role: str | None = None
    confidence: float | None = None
    bounding_regions: list[RawRegion] = Field(
        default_factory=list, alias="boundingRegions"
    )


class RawCell(_RawModel):
    row_index: int = Field(default=0, alias="rowIndex")
    column_index: int = Field(default=0, alias="columnIndex")
    content: str = ""
    confidence: float | None = None
    bounding_regions: list[RawRegion] = Field(
        default_factory=list, alias="boundingRegions"
    )


class RawTable(_RawModel):
    row_count: int = Field(default=0, alias="rowCount")
    column_count: int = Field(default=0, alias="columnCount")
    cells: list[RawCell] = Field(default_factory=list)
    bounding_regions: list[RawRegion] = Field(
        default_factory=list, alias="boundingRegions"
    )


class RawKeyValueElement(_RawModel):
    content: str = ""
    bounding_regions: list[RawRegion] = Field(
        default_factory=list, alias="boundingRegions"
    )


class RawKeyValuePair(_RawModel):
    key: RawKeyValueElement | str | None = None
    value: RawKeyValueElement | str | None = None
    confidence: float | None = None
    bounding_regions: list[RawRegion] = Field(
        default_factory=list, alias="boundingRegions"
    )


class AnalysisResult(_RawModel):
    """The subset of a document-analysis result this pipeline consumes."""

    pages: list[RawPage] = Field(default_factory=list)
    paragraphs: list[RawParagraph] = Field(default_factory=list)
    tables: list[RawTable] = Field(default_factory=list)
    key_value_pairs: list[RawKeyValuePair] = Field(
        default_factory=list, alias="keyValuePairs"
    )


def validate_analysis_result(result: AnalysisResult) -> None:
    """Caller-side precondition check before running the pipeline.

    Raises:
        InvalidAnalysisResultError: If the result has no pages or no
            paragraphs, tables or key-value pairs.
    """
    errors = []
    if not result.pages:
        errors.append("no pages found in document")
    if not (result.paragraphs or result.tables or result.key_value_pairs):
        errors.append("no structured data found in document")
    if errors:
        raise InvalidAnalysisResultError("; ".join(errors))


def page_dimensions(result: AnalysisResult) -> list[PageDimensions]:
    """Page sizes in points. Pages without a positive size are skipped."""
    pages = []
    for page in result.pages:
        if page.width <= 0 or page.height <= 0:
            logger.warn("skipping page without size", page_number=page.page_number)
            continue
        unit = _PAGE_UNITS.get((page.unit or "").lower())
        # A bare page size this small can only be inches (8.5 x 11)
        if unit == "inches" or (unit is None and max(page.width, page.height) <= 20):
            factor = POINTS_PER_INCH
        else:
            factor = 1.0
        pages.append(
            PageDimensions(
                page_number=page.page_number,
                width=page.width * factor,
                height=page.height * factor,
            )
        )
    return pages


def _to_region(raw: RawRegion, unit: str | None) -> BoundingRegion | None:
    try:
        return BoundingRegion(page_number=raw.page_number, polygon=raw.polygon, unit=unit)
    except ValidationError as e:
        logger.warn(
            "invalid polygon in analysis result",
            page_number=raw.page_number,
            error=str(e),
        )
        return None


def _to_regions(raws: list[RawRegion], units: dict[int, str | None]) -> list[BoundingRegion]:
    regions = []
    for raw in raws:
        region = _to_region(raw, units.get(raw.page_number))
        if region is not None:
            regions.append(region)
    return regions


def _kv_part(part: RawKeyValueElement | str | None) -> tuple[str, list[RawRegion]]:
    if part is None:
        return "", []
    if isinstance(part, str):
        return part, []
    return part.content, part.bounding_regions


def _enclosing_region(regions: list[BoundingRegion]) -> BoundingRegion | None:
    """One rectangle covering key and value regions on the first region's page."""
    usable = [
        r for r in regions
        if not is_malformed(r) and r.page_number == regions[0].page_number
    ]
    if not usable:
        return regions[0] if regions else None
    xs = [p.x for r in usable for p in r.polygon]
    ys = [p.y for r in usable for p in r.polygon]
    min_x, max_x, min_y, max_y = min(xs), max(xs), min(ys), max(ys)
    return BoundingRegion(
        page_number=usable[0].page_number,
        polygon=[
            Point(x=min_x, y=min_y),
            Point(x=max_x, y=min_y),
            Point(x=max_x, y=max_y),
            Point(x=min_x, y=max_y),
        ],
        unit=usable[0].unit,
    )


def _confidence(value: float | None) -> float:
    if value is None:
        return 1.0
    return min(1.0, max(0.0, value))


def extract_elements(result: AnalysisResult) -> list[Element]:
    """Flatten paragraphs, tables, table cells and key-value pairs into elements.

    Element ids are stable for a given result: ``paragraph-{i}``,
    ``table-{t}``, ``table-{t}-cell-{c}`` and ``kvp-{i}``.
    """
    units = {
        page.page_number: _PAGE_UNITS.get((page.unit or "").lower())
        for page in result.pages
    }
    elements: list[Element] = []

    for i, paragraph in enumerate(result.paragraphs):
        elements.append(
            ParagraphElement(
                element_id=f"paragraph-{i}",
                text=paragraph.content,
                role=paragraph.role,
                confidence=_confidence(paragraph.confidence),
                regions=_to_regions(paragraph.bounding_regions, units),
            )
        )

    for t, table in enumerate(result.tables):
        ordered_cells = sorted(table.cells, key=lambda c: (c.row_index, c.column_index))
        elements.append(
            TableElement(
                element_id=f"table-{t}",
                text=" ".join(c.content for c in ordered_cells if c.content),
                table_index=t,
                row_count=table.row_count,
                column_count=table.column_count,
                regions=_to_regions(table.bounding_regions, units),
            )
        )
        for c, cell in enumerate(table.cells):
            elements.append(
                TableCellElement(
                    element_id=f"table-{t}-cell-{c}",
                    text=cell.content,
                    table_index=t,
                    row_index=cell.row_index,
                    column_index=cell.column_index,
                    confidence=_confidence(cell.confidence),
                    regions=_to_regions(cell.bounding_regions, units),
                )
            )

    for i, pair in enumerate(result.key_value_pairs):
        key_text, key_regions = _kv_part(pair.key)
        value_text, value_regions = _kv_part(pair.value)
        regions = _to_regions(pair.bounding_regions, units)
        if not regions:
            part_regions = _to_regions(key_regions + value_regions, units)
            enclosing = _enclosing_region(part_regions)
            regions = [enclosing] if enclosing else []
        elements.append(
            KeyValuePairElement(
                element_id=f"kvp-{i}",
                text=f"{key_text} {value_text}".strip(),
                key=key_text,
                value=value_text,
                confidence=_confidence(pair.confidence),
                regions=regions,
            )
        )

    logger.info(
        "analysis result flattened",
        paragraphs=len(result.paragraphs),
        tables=len(result.tables),
        key_value_pairs=len(result.key_value_pairs),
        total_elements=len(elements),
    )
    return elements


def flip_region_origin(region: BoundingRegion, page: PageDimensions) -> BoundingRegion:
    """Convert a bottom-left-origin region to top-left origin.

    Works in the region's own unit, so the resulting box has
    ``y = pageHeight - y - height``. The detected unit is pinned on the
    result because flipping can move values across the 1.0 boundary.
    """
    if is_malformed(region):
        return region
    unit = detect_unit(region)
    if unit == "normalized":
        page_height = 1.0
    elif unit == "inches":
        page_height = page.height / POINTS_PER_INCH
    else:
        page_height = page.height
    return BoundingRegion(
        page_number=region.page_number,
        polygon=[Point(x=p.x, y=page_height - p.y) for p in region.polygon],
        unit=unit,
    )


def apply_origin(
    elements: list[Element], pages: list[PageDimensions], origin: str
) -> list[Element]:
    """Return elements in top-left coordinates for the declared source origin."""
    if origin == "top-left":
        return elements
    if origin != "bottom-left":
        raise ValueError(f"unknown origin {origin!r}")

    page_by_number = {p.page_number: p for p in pages}
    flipped: list[Element] = []
    for element in elements:
        regions = [
            flip_region_origin(r, page_by_number[r.page_number])
            if r.page_number in page_by_number
            else r
            for r in element.regions
        ]
        flipped.append(element.model_copy(update={"regions": regions}))

    logger.debug("flipped element origins", origin=origin, elements=len(flipped))
    return flipped
