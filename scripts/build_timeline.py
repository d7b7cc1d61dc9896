#!/usr/bin/env python3
"""Build a walkthrough timeline from saved analysis and narration JSON.

Usage:
    python scripts/build_timeline.py <analysis.json> <narration.json> [--pdf PATH] [--json]

Prints each step's matched region and keyframe window for manual
verification of alignment quality.
"""

import argparse
import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pdf_walkthrough.presentation import (
    InvalidAnalysisResultError,
    PipelineConfig,
    WalkthroughPipeline,
)


def _load_json(path: Path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def main():
    parser = argparse.ArgumentParser(description="Build a walkthrough timeline")
    parser.add_argument("analysis_path", help="Path to document-analysis result JSON")
    parser.add_argument("narration_path", help="Path to narration steps JSON")
    parser.add_argument("--pdf", default=None, help="PDF to read page sizes from")
    parser.add_argument("--page", type=int, default=1, help="Page to present (default: 1)")
    parser.add_argument(
        "--json", action="store_true", help="Print the full result as JSON"
    )
    args = parser.parse_args()

    analysis_path = Path(args.analysis_path)
    narration_path = Path(args.narration_path)
    for path in (analysis_path, narration_path):
        if not path.exists():
            print(f"Error: File not found: {path}")
            sys.exit(1)

    narration = _load_json(narration_path)
    # Narration files are either a bare step list or {"steps": [...]}
    steps = narration["steps"] if isinstance(narration, dict) else narration

    config = PipelineConfig.from_env(page_number=args.page)
    try:
        result = WalkthroughPipeline(config).run(
            _load_json(analysis_path), steps, pdf_path=args.pdf
        )
    except (InvalidAnalysisResultError, FileNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.json:
        print(result.model_dump_json(indent=2))
        return

    print(f"Run: {result.run_id}")
    print(f"Page: {result.page_number}, steps: {len(result.timeline)}")
    print(f"Total duration: {result.total_duration:.2f}s")
    print("=" * 80)

    for entry, highlight in zip(result.timeline, result.highlights):
        marker = "[REVIEW]" if highlight.needs_review else "[OK]"
        box = entry.box
        print(
            f"\n{marker} Step {entry.step_number} "
            f"{entry.start_time:.2f}s-{entry.end_time:.2f}s "
            f"(frames {entry.start_frame}-{entry.end_frame})"
        )
        print(f"  Query: {highlight.highlight_text[:100]}")
        print(
            f"  Box: x={box.x:.1f} y={box.y:.1f} w={box.width:.1f} h={box.height:.1f} "
            f"zoom={entry.keyframes[1].zoom:.2f}"
        )
        if highlight.matched_elements:
            ids = ", ".join(e.element_id for e in highlight.matched_elements)
            print(f"  Elements: {ids} (similarity={highlight.similarity:.2f})")

    print("\n" + "=" * 80)
    stats = result.statistics
    print(
        f"Sections: {stats['sections_with_elements']}/{stats['total_sections']} populated, "
        f"{stats['total_elements']} elements"
    )
    for key, section in stats["section_breakdown"].items():
        print(
            f"  {key}: {section['element_count']} elements, "
            f"{section['sub_section_count']} sub-sections"
        )

    if result.malformed_elements:
        print(f"\nDropped elements: {', '.join(result.malformed_elements)}")
    print("\nTimeline complete.")


if __name__ == "__main__":
    main()
