"""FastAPI REST API for the walkthrough pipeline."""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .logger import logger
from .presentation import (
    AlignedHighlight,
    AnalysisResult,
    InvalidAnalysisResultError,
    NarrationStep,
    PageDimensions,
    PipelineConfig,
    Section,
    TaxonomyEntry,
    TimelineEntry,
    WalkthroughPipeline,
)


# --- Request/Response Models ---


class TimelineRequest(BaseModel):
    analysis: AnalysisResult
    steps: list[NarrationStep] = Field(..., min_length=1)
    pages: list[PageDimensions] | None = None
    config: dict[str, Any] = Field(default_factory=dict)


class TimelineResponse(BaseModel):
    run_id: str
    page_number: int
    total_duration: float
    timeline: list[TimelineEntry]
    highlights: list[AlignedHighlight]
    sections: dict[str, Section]
    unresolved_steps: list[int]
    malformed_elements: list[str]


class TaxonomyResponse(BaseModel):
    sections: list[TaxonomyEntry]
    count: int


class HealthResponse(BaseModel):
    status: str
    checks: dict[str, bool] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    code: str
    message: str


# --- App State ---

_base_config: PipelineConfig | None = None


def get_base_config() -> PipelineConfig:
    """Lazy initialization of the environment-derived config."""
    global _base_config
    if _base_config is None:
        _base_config = PipelineConfig.from_env()
    return _base_config


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    logger.info("starting server")

    config = get_base_config()
    logger.info(
        "pipeline configured",
        viewport_width=config.viewport_width,
        viewport_height=config.viewport_height,
        fps=config.fps,
        taxonomy_sections=len(config.taxonomy),
    )

    yield

    logger.info("server shutdown")


app = FastAPI(
    title="PDF Walkthrough API",
    description="Narrated document walkthrough timeline API",
    version="0.1.0",
    lifespan=lifespan,
)


# --- Exception Handlers ---


@app.exception_handler(InvalidAnalysisResultError)
async def invalid_analysis_handler(request, exc: InvalidAnalysisResultError):
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(code="INVALID_ANALYSIS", message=str(exc)).model_dump(),
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(code="INVALID_REQUEST", message=str(exc)).model_dump(),
    )


# --- Health Endpoints ---


@app.get("/health", response_model=HealthResponse)
async def health():
    """Liveness check."""
    return HealthResponse(status="healthy")


# --- Walkthrough Endpoints ---


@app.get("/api/v1/taxonomy", response_model=TaxonomyResponse)
async def taxonomy():
    """List the semantic sections elements are grouped into."""
    sections = get_base_config().taxonomy
    return TaxonomyResponse(sections=sections, count=len(sections))


def _run_pipeline(request: TimelineRequest):
    """Run the synchronous pipeline with per-request overrides."""
    config = get_base_config()
    if request.config:
        config = PipelineConfig.model_validate(
            {**config.model_dump(), **request.config}
        )
    return WalkthroughPipeline(config).run(
        request.analysis, request.steps, pages=request.pages
    )


@app.post("/api/v1/walkthrough/timeline", response_model=TimelineResponse)
async def build_timeline(request: TimelineRequest):
    """Align narration steps to an analysed page and build the keyframe timeline."""
    # Run in thread pool to avoid blocking event loop
    result = await asyncio.to_thread(_run_pipeline, request)
    return TimelineResponse(
        run_id=result.run_id,
        page_number=result.page_number,
        total_duration=result.total_duration,
        timeline=result.timeline,
        highlights=result.highlights,
        sections=result.sections,
        unresolved_steps=result.unresolved_steps,
        malformed_elements=result.malformed_elements,
    )
