"""Pipeline configuration.

Every tunable of the walkthrough pipeline lives on ``PipelineConfig`` so a
different document type can be targeted without code changes. Values come
from constructor arguments, or from ``WALKTHROUGH_*`` environment variables
via ``PipelineConfig.from_env()``.
"""

import os
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .coordinates import POINTS_PER_INCH
from .easing import EASINGS
from .models import HighlightType, TaxonomyEntry, Viewport
from .taxonomy import DEFAULT_TAXONOMY, load_taxonomy

# env var suffix -> field name; the prefix is WALKTHROUGH_
_ENV_FIELDS = {
    "VIEWPORT_WIDTH": "viewport_width",
    "VIEWPORT_HEIGHT": "viewport_height",
    "SCALE": "scale",
    "FPS": "fps",
    "MIN_ZOOM": "min_zoom",
    "MAX_ZOOM": "max_zoom",
    "TARGET_FILL_RATIO": "target_fill_ratio",
    "PROXIMITY_THRESHOLD": "proximity_threshold",
    "SECTION_MATCH_THRESHOLD": "section_match_threshold",
    "ACCEPTANCE_THRESHOLD": "acceptance_threshold",
    "MERGE_SIMILARITY": "merge_similarity",
    "STEP_PAUSE": "step_pause",
    "TRANSITION_DURATION": "transition_duration",
    "DEFAULT_STEP_DURATION": "default_step_duration",
    "DEFAULT_EASING": "default_easing",
    "DEFAULT_HIGHLIGHT_TYPE": "default_highlight_type",
    "ORIGIN": "origin",
    "PAGE_NUMBER": "page_number",
    "TABLE_SECTION_KEY": "table_section_key",
}


class PipelineConfig(BaseModel):
    """Validated configuration for one walkthrough run."""

    # Render surface
    viewport_width: float = Field(default=1920, gt=0)
    viewport_height: float = Field(default=1080, gt=0)
    scale: float = Field(default=1.0, gt=0)
    fps: int = Field(default=30, gt=0)

    # Coordinates
    origin: Literal["top-left", "bottom-left"] = "top-left"
    page_number: int = Field(default=1, ge=1)

    # Section grouping
    taxonomy: list[TaxonomyEntry] = Field(
        default_factory=lambda: list(DEFAULT_TAXONOMY)
    )
    section_match_threshold: float = Field(default=0.3, ge=0, le=1)
    proximity_threshold: float | None = Field(default=None, gt=0)  # px; None = 1 inch
    table_section_key: str | None = "serviceDescription"

    # Alignment
    acceptance_threshold: float = Field(default=0.5, ge=0, le=1)
    merge_similarity: float = Field(default=0.7, ge=0, le=1)
    merge_window_x: float = Field(default=200, ge=0)
    merge_window_y: float = Field(default=50, ge=0)
    max_merge_elements: int = Field(default=5, ge=1)
    placeholder_margin: float = 50
    placeholder_spacing: float = 100
    placeholder_width: float = Field(default=200, gt=0)
    placeholder_height: float = Field(default=30, gt=0)

    # Timeline
    min_zoom: float = Field(default=1.0, gt=0)
    max_zoom: float = Field(default=3.0, gt=0)
    target_fill_ratio: float = Field(default=0.6, gt=0, le=1)
    step_pause: float = Field(default=0.5, ge=0)
    transition_duration: float = Field(default=0.5, ge=0)
    default_step_duration: float = Field(default=3.0, gt=0)
    default_easing: str = "ease_in_out_cubic"
    default_highlight_type: HighlightType = "border"

    @field_validator("default_easing")
    @classmethod
    def validate_easing(cls, v: str) -> str:
        if v not in EASINGS:
            raise ValueError(f"unknown easing {v!r}")
        return v

    @field_validator("taxonomy")
    @classmethod
    def validate_taxonomy(cls, v: list[TaxonomyEntry]) -> list[TaxonomyEntry]:
        keys = [entry.key for entry in v]
        if len(set(keys)) != len(keys):
            raise ValueError("taxonomy keys must be unique")
        return v

    @model_validator(mode="after")
    def validate_zoom_range(self) -> "PipelineConfig":
        if self.min_zoom > self.max_zoom:
            raise ValueError("min_zoom must be less than or equal to max_zoom")
        return self

    @property
    def viewport(self) -> Viewport:
        return Viewport(width=self.viewport_width, height=self.viewport_height)

    @property
    def effective_proximity_threshold(self) -> float:
        """Sub-section gap in pixels, one inch at the current scale by default."""
        if self.proximity_threshold is not None:
            return self.proximity_threshold
        return POINTS_PER_INCH * self.scale

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfig":
        """Build a config from WALKTHROUGH_* environment variables.

        Unset variables keep their defaults. ``WALKTHROUGH_TAXONOMY_PATH``
        points at a JSON taxonomy file. Explicit keyword overrides win.
        """
        values: dict = {}
        for suffix, field_name in _ENV_FIELDS.items():
            raw = os.getenv(f"WALKTHROUGH_{suffix}")
            if raw is not None and raw.strip() != "":
                values[field_name] = raw.strip()

        taxonomy_path = os.getenv("WALKTHROUGH_TAXONOMY_PATH")
        if taxonomy_path:
            values["taxonomy"] = load_taxonomy(taxonomy_path)

        values.update(overrides)
        return cls.model_validate(values)
