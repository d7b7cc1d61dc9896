"""End-to-end walkthrough pipeline for one document page."""

import time
import uuid
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from ..logger import clear_context, logger, set_context
from .alignment import align, unresolved_steps
from .analysis import (
    AnalysisResult,
    apply_origin,
    extract_elements,
    page_dimensions,
    validate_analysis_result,
)
from .config import PipelineConfig
from .coordinates import normalize_elements
from .models import AlignedHighlight, NarrationStep, PageDimensions, Section, TimelineEntry
from .pdf_pages import read_page_dimensions
from .sections import group, section_statistics
from .timeline import build_timeline, timeline_duration


class WalkthroughResult(BaseModel):
    """Everything the renderer needs for one page presentation."""

    run_id: str
    page_number: int
    timeline: list[TimelineEntry] = Field(default_factory=list)
    highlights: list[AlignedHighlight] = Field(default_factory=list)
    sections: dict[str, Section] = Field(default_factory=dict)
    unresolved_steps: list[int] = Field(default_factory=list)
    malformed_elements: list[str] = Field(default_factory=list)
    total_duration: float = 0.0
    statistics: dict = Field(default_factory=dict)


def _coerce_analysis(analysis: AnalysisResult | dict[str, Any]) -> AnalysisResult:
    if isinstance(analysis, AnalysisResult):
        return analysis
    return AnalysisResult.model_validate(analysis)


def _coerce_steps(steps: list[NarrationStep | dict[str, Any]]) -> list[NarrationStep]:
    return [s if isinstance(s, NarrationStep) else NarrationStep.model_validate(s) for s in steps]


class WalkthroughPipeline:
    """Runs normalization, grouping, alignment and timeline building.

    Each ``run`` owns its element, box, section and timeline objects; the
    pipeline itself only holds configuration and can be reused.
    """

    def __init__(self, config: PipelineConfig | None = None):
        self.config = config or PipelineConfig()

    def run(
        self,
        analysis: AnalysisResult | dict[str, Any],
        steps: list[NarrationStep | dict[str, Any]],
        pages: list[PageDimensions] | None = None,
        pdf_path: str | Path | None = None,
    ) -> WalkthroughResult:
        """Build the presentation for the configured page.

        Args:
            analysis: Document-analysis result (model or raw payload).
            steps: Narration steps in presentation order.
            pages: Page sizes in points; overrides the analysis result.
            pdf_path: PDF to read page sizes from when neither ``pages`` nor
                the analysis result provide them.

        Returns:
            WalkthroughResult with one highlight and timeline entry per step.

        Raises:
            InvalidAnalysisResultError: If the analysis result is empty.
            FileNotFoundError: If ``pdf_path`` is needed and missing.
        """
        config = self.config
        run_id = str(uuid.uuid4())
        set_context(run_id=run_id, page_number=config.page_number)

        try:
            start = time.perf_counter()

            result = _coerce_analysis(analysis)
            validate_analysis_result(result)
            narration = _coerce_steps(steps)

            if pages is None:
                pages = page_dimensions(result)
            if not pages and pdf_path is not None:
                pages = read_page_dimensions(pdf_path)

            elements = apply_origin(extract_elements(result), pages, config.origin)
            page_elements = [
                e for e in elements if e.page_number in (config.page_number, None)
            ]
            page = next((p for p in pages if p.page_number == config.page_number), None)
            if page is None:
                logger.warn("no dimensions for presented page; every element dropped")

            boxes, malformed = normalize_elements(
                page_elements, [page] if page else [], config.viewport, config.scale
            )

            sections = group(
                page_elements,
                config.taxonomy,
                boxes,
                proximity_threshold=config.effective_proximity_threshold,
                match_threshold=config.section_match_threshold,
                table_section_key=config.table_section_key,
            )

            highlights = align(narration, page_elements, boxes, config)
            timeline = build_timeline(
                highlights,
                [s.duration for s in narration],
                fps=config.fps,
                config=config,
                steps=narration,
            )

            unresolved = unresolved_steps(highlights)
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "walkthrough built",
                elements=len(page_elements),
                malformed=len(malformed),
                steps=len(narration),
                unresolved=len(unresolved),
                total_duration=round(timeline_duration(timeline), 3),
                duration_ms=round(duration_ms, 2),
            )

            return WalkthroughResult(
                run_id=run_id,
                page_number=config.page_number,
                timeline=timeline,
                highlights=highlights,
                sections=sections,
                unresolved_steps=unresolved,
                malformed_elements=malformed,
                total_duration=timeline_duration(timeline),
                statistics=section_statistics(sections),
            )
        finally:
            clear_context()


def build_walkthrough(
    analysis: AnalysisResult | dict[str, Any],
    steps: list[NarrationStep | dict[str, Any]],
    config: PipelineConfig | None = None,
    pages: list[PageDimensions] | None = None,
) -> WalkthroughResult:
    """Convenience wrapper around ``WalkthroughPipeline(config).run``."""
    return WalkthroughPipeline(config).run(analysis, steps, pages=pages)
