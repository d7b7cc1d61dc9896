from .models import (
    AlignedHighlight,
    BoundingRegion,
    CanonicalBox,
    Element,
    Keyframe,
    KeyValuePairElement,
    NarrationStep,
    PageDimensions,
    ParagraphElement,
    Point,
    Section,
    SubSection,
    TableCellElement,
    TableElement,
    TaxonomyEntry,
    TimelineEntry,
    Viewport,
)
from .config import PipelineConfig
from .taxonomy import DEFAULT_TAXONOMY, load_taxonomy
from .analysis import (
    AnalysisResult,
    InvalidAnalysisResultError,
    apply_origin,
    extract_elements,
    flip_region_origin,
    page_dimensions,
    validate_analysis_result,
)
from .pdf_pages import read_page_dimensions
from .coordinates import detect_unit, normalize, normalize_elements
from .sections import group, rendered_sections, section_statistics
from .similarity import normalize_text, text_similarity
from .alignment import align, unresolved_steps
from .easing import EASINGS, get_easing
from .timeline import build_timeline, center_on, optimal_zoom, sample_at, timeline_duration
from .pipeline import WalkthroughPipeline, WalkthroughResult, build_walkthrough

__all__ = [
    # Models
    "AlignedHighlight",
    "BoundingRegion",
    "CanonicalBox",
    "Element",
    "Keyframe",
    "KeyValuePairElement",
    "NarrationStep",
    "PageDimensions",
    "ParagraphElement",
    "Point",
    "Section",
    "SubSection",
    "TableCellElement",
    "TableElement",
    "TaxonomyEntry",
    "TimelineEntry",
    "Viewport",
    # Configuration
    "PipelineConfig",
    "DEFAULT_TAXONOMY",
    "load_taxonomy",
    # Analysis adapter
    "AnalysisResult",
    "InvalidAnalysisResultError",
    "apply_origin",
    "extract_elements",
    "flip_region_origin",
    "page_dimensions",
    "validate_analysis_result",
    "read_page_dimensions",
    # Coordinates
    "detect_unit",
    "normalize",
    "normalize_elements",
    # Sections
    "group",
    "rendered_sections",
    "section_statistics",
    # Alignment
    "normalize_text",
    "text_similarity",
    "align",
    "unresolved_steps",
    # Timeline
    "EASINGS",
    "get_easing",
    "build_timeline",
    "center_on",
    "optimal_zoom",
    "sample_at",
    "timeline_duration",
    # Pipeline
    "WalkthroughPipeline",
    "WalkthroughResult",
    "build_walkthrough",
]
