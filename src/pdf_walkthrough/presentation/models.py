"""Shared data models for the walkthrough pipeline."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CoordinateUnit = Literal["normalized", "inches", "points"]
HighlightType = Literal["border", "spotlight", "pulse", "glow", "underline"]


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class BoundingRegion(BaseModel):
    """A polygon emitted by the analysis service, in an undeclared or declared unit."""

    model_config = ConfigDict(frozen=True)

    page_number: int = 1
    polygon: list[Point]
    unit: CoordinateUnit | None = None  # None = detect from the values

    @field_validator("polygon", mode="before")
    @classmethod
    def coerce_flat_polygon(cls, v):
        # The analysis SDK emits either [{x, y}, ...] or a flat [x0, y0, x1, y1, ...]
        if isinstance(v, (list, tuple)) and v and all(
            isinstance(p, (int, float)) for p in v
        ):
            if len(v) % 2 != 0:
                raise ValueError("flat polygon must contain an even number of values")
            return [{"x": v[i], "y": v[i + 1]} for i in range(0, len(v), 2)]
        return v


class _ElementBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    element_id: str
    text: str = ""
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    regions: list[BoundingRegion] = Field(default_factory=list)

    @property
    def primary_region(self) -> BoundingRegion | None:
        return self.regions[0] if self.regions else None

    @property
    def page_number(self) -> int | None:
        region = self.primary_region
        return region.page_number if region else None


class ParagraphElement(_ElementBase):
    kind: Literal["paragraph"] = "paragraph"
    role: str | None = None  # "title", "sectionHeading", "pageFooter", ...


class TableElement(_ElementBase):
    kind: Literal["table"] = "table"
    table_index: int = 0
    row_count: int = 0
    column_count: int = 0


class TableCellElement(_ElementBase):
    kind: Literal["tableCell"] = "tableCell"
    table_index: int = 0
    row_index: int
    column_index: int


class KeyValuePairElement(_ElementBase):
    kind: Literal["keyValuePair"] = "keyValuePair"
    key: str = ""
    value: str = ""


Element = Annotated[
    ParagraphElement | TableElement | TableCellElement | KeyValuePairElement,
    Field(discriminator="kind"),
]


class Viewport(BaseModel):
    """Target render surface size in pixels."""

    width: float = Field(gt=0)
    height: float = Field(gt=0)


class PageDimensions(BaseModel):
    """Page size in PDF points (1/72 inch)."""

    page_number: int = 1
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class CanonicalBox(BaseModel):
    """Axis-aligned rectangle in viewport pixels, top-left origin."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def area(self) -> float:
        return self.width * self.height

    @classmethod
    def union(cls, boxes: list["CanonicalBox"]) -> "CanonicalBox | None":
        """Smallest box containing every box, or None for an empty list."""
        if not boxes:
            return None
        min_x = min(b.x for b in boxes)
        min_y = min(b.y for b in boxes)
        max_x = max(b.right for b in boxes)
        max_y = max(b.bottom for b in boxes)
        return cls(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


class TaxonomyEntry(BaseModel):
    """One semantic section the grouper can assign elements to."""

    key: str
    display_name: str
    color: str = "#f59e0b"
    keywords: list[str] = Field(min_length=1)


class SubSection(BaseModel):
    elements: list[Element]
    bounding_box: CanonicalBox | None = None


class Section(BaseModel):
    key: str
    display_name: str
    color: str
    elements: list[Element] = Field(default_factory=list)
    bounding_box: CanonicalBox | None = None
    sub_sections: list[SubSection] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.elements


class NarrationStep(BaseModel):
    """One narration step from the narration-generation collaborator."""

    model_config = ConfigDict(populate_by_name=True)

    step_number: int = Field(alias="stepNumber")
    narrative: str = ""
    highlight_text: str = Field(default="", alias="highlightText")
    duration: float = 0.0  # seconds
    zoom_level: float | None = Field(default=None, alias="zoomLevel")
    highlight_type: HighlightType | None = Field(default=None, alias="highlightType")
    easing: str | None = None

    @property
    def query_text(self) -> str:
        """Text to align against the document; narrative is the fallback."""
        return self.highlight_text.strip() or self.narrative.strip()


class AlignedHighlight(BaseModel):
    """The box a narration step should emphasise."""

    step: int
    box: CanonicalBox
    matched_elements: list[Element] = Field(default_factory=list)
    needs_review: bool = False
    highlight_text: str = ""
    narrative: str = ""
    similarity: float = 0.0


class Keyframe(BaseModel):
    time_seconds: float
    zoom: float
    pan_x: float
    pan_y: float
    opacity: float


class TimelineEntry(BaseModel):
    step_index: int
    step_number: int
    start_time: float
    end_time: float
    start_frame: int
    end_frame: int
    keyframes: list[Keyframe]
    highlight_type: HighlightType = "border"
    easing: str = "ease_in_out_cubic"
    caption: str = ""
    box: CanonicalBox
    needs_review: bool = False

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time
