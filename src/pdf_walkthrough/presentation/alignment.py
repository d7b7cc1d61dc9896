"""Narration-to-document alignment.

Steps are aligned one at a time in step order. An element matched by an
earlier step is never offered to a later one, so the same fragment cannot
light up for two different steps. The greedy pass is deterministic but not
globally optimal.
"""

import time

from pydantic import BaseModel

from ..logger import logger
from .config import PipelineConfig
from .models import AlignedHighlight, CanonicalBox, Element, NarrationStep
from .similarity import has_keyword_overlap, is_contained, text_similarity


class Candidate(BaseModel):
    """An unconsumed element scored against one step's query text."""

    element: Element
    box: CanonicalBox
    similarity: float
    exact: bool
    keyword: bool

    @property
    def is_usable(self) -> bool:
        return bool(self.element.text.strip()) and self.box.area > 0

    def rank_key(self) -> tuple[bool, bool, float]:
        return (self.exact, self.keyword, self.similarity)


def score_candidates(
    query: str,
    elements: list[Element],
    boxes: dict[str, CanonicalBox],
    consumed: set[str],
) -> list[Candidate]:
    """Score every unconsumed, boxed element and rank best first.

    Ranking is exact containment, then keyword overlap, then similarity.
    Ties keep document order.
    """
    candidates = [
        Candidate(
            element=element,
            box=boxes[element.element_id],
            similarity=text_similarity(query, element.text),
            exact=is_contained(query, element.text),
            keyword=has_keyword_overlap(query, element.text),
        )
        for element in elements
        if element.element_id not in consumed and element.element_id in boxes
    ]
    candidates.sort(key=Candidate.rank_key, reverse=True)
    return candidates


def placeholder_box(index: int, config: PipelineConfig) -> CanonicalBox:
    """Fixed box for a step that could not be aligned, stacked by step index."""
    return CanonicalBox(
        x=config.placeholder_margin,
        y=config.placeholder_margin + index * config.placeholder_spacing,
        width=config.placeholder_width,
        height=config.placeholder_height,
    )


def _is_accepted(candidate: Candidate, config: PipelineConfig) -> bool:
    return candidate.is_usable and (
        candidate.similarity > config.acceptance_threshold or candidate.exact
    )


def _merge_group(
    best: Candidate, candidates: list[Candidate], config: PipelineConfig
) -> list[Candidate]:
    """Best match plus close, strong neighbours; just the best if too many."""
    group = [best]
    for candidate in candidates:
        if candidate is best or not candidate.is_usable:
            continue
        if not (candidate.similarity > config.merge_similarity or candidate.exact):
            continue
        if abs(candidate.box.y - best.box.y) >= config.merge_window_y:
            continue
        if abs(candidate.box.x - best.box.x) >= config.merge_window_x:
            continue
        group.append(candidate)

    # Oversized groups collapse to the best match
    if len(group) > config.max_merge_elements:
        return [best]
    return group


def align(
    steps: list[NarrationStep],
    elements: list[Element],
    boxes: dict[str, CanonicalBox],
    config: PipelineConfig | None = None,
) -> list[AlignedHighlight]:
    """Find the highlight region for each narration step.

    Args:
        steps: Narration steps in presentation order.
        elements: Extracted elements for the run.
        boxes: Per-run element-id -> canonical box map.
        config: Thresholds and placeholder geometry.

    Returns:
        Exactly one AlignedHighlight per step, in step order. Steps with no
        acceptable match are flagged ``needs_review`` with a placeholder box.
    """
    config = config or PipelineConfig()
    start = time.perf_counter()

    consumed: set[str] = set()
    highlights: list[AlignedHighlight] = []

    for index, step in enumerate(steps):
        query = step.query_text
        candidates = score_candidates(query, elements, boxes, consumed) if query else []
        best = candidates[0] if candidates else None

        if best is None or not _is_accepted(best, config):
            logger.warn(
                "narration step needs review",
                step=step.step_number,
                highlight_text=query,
                best_similarity=round(best.similarity, 3) if best else None,
                candidates=len(candidates),
            )
            highlights.append(
                AlignedHighlight(
                    step=step.step_number,
                    box=placeholder_box(index, config),
                    matched_elements=[],
                    needs_review=True,
                    highlight_text=query,
                    narrative=step.narrative,
                    similarity=best.similarity if best else 0.0,
                )
            )
            continue

        group = _merge_group(best, candidates, config)
        for candidate in group:
            consumed.add(candidate.element.element_id)

        highlights.append(
            AlignedHighlight(
                step=step.step_number,
                box=CanonicalBox.union([c.box for c in group]),
                matched_elements=[c.element for c in group],
                needs_review=False,
                highlight_text=query,
                narrative=step.narrative,
                similarity=best.similarity,
            )
        )
        logger.debug(
            "narration step aligned",
            step=step.step_number,
            element_ids=[c.element.element_id for c in group],
            similarity=round(best.similarity, 3),
            exact=best.exact,
        )

    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "narration aligned",
        steps=len(steps),
        aligned=sum(1 for h in highlights if not h.needs_review),
        needs_review=sum(1 for h in highlights if h.needs_review),
        duration_ms=round(duration_ms, 2),
    )
    return highlights


def unresolved_steps(highlights: list[AlignedHighlight]) -> list[int]:
    """Step numbers whose highlight is a placeholder awaiting manual review."""
    return [h.step for h in highlights if h.needs_review]
