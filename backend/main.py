"""
FastAPI application entry point for the Grant Proposal Assistant Backend.

This file defines the FastAPI application and its endpoints, serving as the
entry point for all frontend requests to the critique/improve/review pipeline
and to the saved proposal store.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from app.core.config import settings
from app.core.database import create_tables
from app.core.exceptions import PersistenceError, ProposalAssistantError
from app.graphs import critique_draft, improve_sections, review_draft, section_key
from app.models.schemas import (
    AIRequest,
    CritiqueResponse,
    ImprovementResponse,
    FinalReviewResponse,
    SaveProposalRequest,
    ProposalRecord,
    ProposalListResponse,
    ErrorResponse,
    HealthResponse,
)
from app.services.proposal_service import ProposalService

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown tasks."""
    logger.info("Starting Grant Proposal Assistant Backend")
    logger.info(f"Environment: {settings.environment}")

    database_url = settings.get_database_url()
    db_type = "PostgreSQL" if database_url.startswith("postgresql") else "SQLite"
    logger.info(f"Using {db_type} database")

    try:
        create_tables()
        logger.info("Database tables initialized successfully")
    except Exception as e:
        # Saved proposals degrade to an empty list; the pipeline still works
        logger.error(f"Failed to initialize database: {e}")

    yield
    logger.info("Shutting down Grant Proposal Assistant Backend")


app = FastAPI(
    title="Grant Proposal Assistant API",
    description="Backend API for AI-assisted grant proposal critique, improvement and review",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, error: str, details=None, error_code=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details, error_code=error_code).model_dump(),
    )


@app.exception_handler(ProposalAssistantError)
async def proposal_error_handler(request: Request, exc: ProposalAssistantError):
    logger.error(f"{request.method} {request.url.path} failed: {exc.error_code}: {exc}")
    return error_response(exc.status_code, exc.message, exc.details, exc.error_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    exc_str = f"{exc}".replace("\n", " ").replace("   ", " ")
    logger.error(f"{request.method} {request.url.path}: {exc_str}")
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Invalid request", exc_str, "request_validation_error"
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), error_code="http_error")


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unexpected errors."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "An unexpected error occurred while processing your request",
    )


@app.get("/", response_model=HealthResponse)
async def root():
    """Root endpoint for basic health check."""
    return HealthResponse(status="healthy", timestamp=datetime.now(), version=APP_VERSION)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Detailed health check endpoint."""
    return HealthResponse(status="healthy", timestamp=datetime.now(), version=APP_VERSION)


@app.post("/ai")
async def process_with_ai(request: AIRequest):
    """
    Run one AI step of the proposal pipeline.

    - critique: per-section status and feedback, merged with the draft's text
    - improve: two rewrite options for each requested section
    - final: holistic narrative review of the assembled draft
    """
    start_time = time.time()
    logger.info(f"Processing {request.stage} request...")

    try:
        if request.stage == "critique":
            sections = await critique_draft(request.draft)
            response = CritiqueResponse(sections=sections)

        elif request.stage == "improve":
            names = request.requested_sections()
            improvements, failures = await improve_sections(request.draft, names)
            first_key = section_key(names[0].strip())
            response = ImprovementResponse(
                options=improvements.get(first_key, []),
                improvements=improvements,
                failures=failures,
            )

        else:
            feedback = await review_draft(request.draft)
            response = FinalReviewResponse(feedback=feedback)

    except ProposalAssistantError:
        raise
    except Exception as e:
        logger.error(f"Error in {request.stage} request: {e}", exc_info=True)
        raise ProposalAssistantError(str(e), message="Failed to process with AI")

    logger.info(f"{request.stage} request completed in {time.time() - start_time:.2f}s")
    return response


@app.get("/fetch", response_model=ProposalListResponse)
async def fetch_proposals():
    """List saved proposals, newest first. An unreachable store yields an empty list."""
    try:
        proposals = ProposalService.list_proposals()
    except PersistenceError as e:
        logger.warning(f"Proposal store unavailable, returning empty list: {e}")
        proposals = []

    return ProposalListResponse(proposals=[ProposalRecord(**p) for p in proposals])


@app.post("/save", response_model=ProposalRecord)
async def save_proposal(request: SaveProposalRequest):
    """Persist an assembled draft and its final review."""
    record = ProposalService.save_proposal(
        content=request.content,
        title=request.title,
        feedback=request.feedback,
    )
    logger.info(f"Saved proposal with ID: {record['id']}")
    return ProposalRecord(**record)


@app.get("/proposals/{proposal_id}", response_model=ProposalRecord)
async def get_proposal(proposal_id: int):
    """Get a single saved proposal, e.g. for download."""
    record = ProposalService.get_proposal(proposal_id)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Proposal {proposal_id} not found",
        )
    return ProposalRecord(**record)


if __name__ == "__main__":
    # Run the application
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True, log_level="debug")
