"""Semantic section grouping by keyword score and vertical proximity."""

from ..logger import logger
from .models import CanonicalBox, Element, Section, SubSection, TaxonomyEntry

DEFAULT_MATCH_THRESHOLD = 0.3


def match_score(text: str, keywords: list[str]) -> float:
    """Fraction of keywords found as case-insensitive substrings of text."""
    if not text or not keywords:
        return 0.0
    lowered = text.lower()
    matches = sum(1 for keyword in keywords if keyword.lower() in lowered)
    return matches / len(keywords)


def categorize(
    element: Element,
    taxonomy: list[TaxonomyEntry],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
    table_section_key: str | None = None,
) -> str | None:
    """Return the key of the first section the element belongs to, or None."""
    taxonomy_keys = {entry.key for entry in taxonomy}

    if element.kind == "table":
        # Whole tables go to one section regardless of cell text
        if table_section_key in taxonomy_keys:
            return table_section_key
        text = element.text
    elif element.kind == "keyValuePair":
        text = element.text or f"{element.key} {element.value}"
    elif element.kind in ("paragraph", "tableCell"):
        text = element.text
    else:
        raise ValueError(f"unknown element kind {element.kind!r}")

    for entry in taxonomy:
        if match_score(text, entry.keywords) > threshold:
            return entry.key
    return None


def build_sub_sections(
    elements: list[Element],
    boxes: dict[str, CanonicalBox],
    proximity_threshold: float,
) -> list[SubSection]:
    """Partition elements into vertically coherent clusters.

    Elements are ordered by the vertical centre of their box; a new cluster
    starts whenever the gap to the previous element's centre exceeds
    ``proximity_threshold`` pixels.
    """
    if not elements:
        return []

    ordered = sorted(elements, key=lambda e: boxes[e.element_id].center_y)

    clusters: list[list[Element]] = [[ordered[0]]]
    previous_y = boxes[ordered[0].element_id].center_y
    for element in ordered[1:]:
        y = boxes[element.element_id].center_y
        if y - previous_y > proximity_threshold:
            clusters.append([element])
        else:
            clusters[-1].append(element)
        previous_y = y

    return [
        SubSection(
            elements=cluster,
            bounding_box=CanonicalBox.union([boxes[e.element_id] for e in cluster]),
        )
        for cluster in clusters
    ]


def group(
    elements: list[Element],
    taxonomy: list[TaxonomyEntry],
    boxes: dict[str, CanonicalBox],
    proximity_threshold: float,
    match_threshold: float = DEFAULT_MATCH_THRESHOLD,
    table_section_key: str | None = None,
) -> dict[str, Section]:
    """Group elements into the taxonomy's sections.

    Every taxonomy key is present in the result, in declaration order. A
    section nobody matched keeps an empty element list and a None bounding
    box. Elements matching no section, or without a box, are left out.

    Args:
        elements: Extracted elements for the run.
        taxonomy: Ordered section definitions; first match wins.
        boxes: Per-run element-id -> canonical box map.
        proximity_threshold: Vertical gap in pixels that splits sub-sections.
        match_threshold: Keyword score an element must exceed.
        table_section_key: Section that receives table elements, if any.

    Returns:
        Mapping of section key to Section.
    """
    members: dict[str, list[Element]] = {entry.key: [] for entry in taxonomy}
    unassigned = 0
    unboxed = 0

    for element in elements:
        if element.element_id not in boxes:
            unboxed += 1
            continue
        key = categorize(element, taxonomy, match_threshold, table_section_key)
        if key is None:
            unassigned += 1
            continue
        members[key].append(element)

    sections: dict[str, Section] = {}
    for entry in taxonomy:
        section_elements = members[entry.key]
        sections[entry.key] = Section(
            key=entry.key,
            display_name=entry.display_name,
            color=entry.color,
            elements=section_elements,
            bounding_box=CanonicalBox.union(
                [boxes[e.element_id] for e in section_elements]
            ),
            sub_sections=build_sub_sections(
                section_elements, boxes, proximity_threshold
            ),
        )

    logger.info(
        "elements grouped into sections",
        total_elements=len(elements),
        sections_with_elements=sum(1 for s in sections.values() if not s.is_empty),
        unassigned=unassigned,
        without_box=unboxed,
    )
    return sections


def rendered_sections(sections: dict[str, Section]) -> dict[str, Section]:
    """Sections to draw; empty ones stay queryable in the full map only."""
    return {key: section for key, section in sections.items() if not section.is_empty}


def section_statistics(sections: dict[str, Section]) -> dict:
    """Summary counts for a grouped section map."""
    breakdown = {
        key: {
            "display_name": section.display_name,
            "element_count": len(section.elements),
            "sub_section_count": len(section.sub_sections),
            "has_bounding_box": section.bounding_box is not None,
        }
        for key, section in sections.items()
        if not section.is_empty
    }
    return {
        "total_sections": len(sections),
        "sections_with_elements": len(breakdown),
        "total_elements": sum(len(s.elements) for s in sections.values()),
        "section_breakdown": breakdown,
    }
