"""
Pydantic models for API request/response validation.

This module defines the strict data contracts for the FastAPI endpoints,
ensuring type safety and clear communication with the frontend.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import List, Dict, Literal, Optional
from datetime import datetime


# Pipeline Models
class SectionRecord(BaseModel):
    """One labeled region of a proposal together with its critique."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Normalized section key")
    name: str = Field(..., description="Heading text as written")
    content: str = Field("", description="Section text taken from the draft")
    needs_work: bool = Field(False, alias="needsWork")
    feedback: str = ""


class AIRequest(BaseModel):
    """Request model for the /ai endpoint."""

    draft: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("draft", "text"),
        description="Full proposal draft",
    )
    stage: Literal["critique", "improve", "final"] = Field(
        ..., validation_alias=AliasChoices("stage", "action")
    )
    section: Optional[str] = Field(
        None, description="Section name to improve (improve stage)"
    )
    sections: Optional[List[str]] = Field(
        None, description="Several section names to improve in one request"
    )

    def requested_sections(self) -> List[str]:
        """Section names for the improve stage, one per section key, in request order."""
        from app.graphs.section_parser import section_key

        names = list(self.sections or [])
        if self.section:
            names.insert(0, self.section)

        unique = {}
        for name in names:
            if name and name.strip():
                unique.setdefault(section_key(name.strip()), name.strip())
        return list(unique.values())


class CritiqueResponse(BaseModel):
    sections: Dict[str, SectionRecord]


class ImprovementResponse(BaseModel):
    """Response model for the improve stage.

    `options` holds the option pair of the first requested section so a
    single-section request can read it directly; `improvements` is keyed by
    section key for every section that succeeded.
    """

    options: List[str] = []
    improvements: Dict[str, List[str]] = {}
    failures: Dict[str, str] = {}


class FinalReviewResponse(BaseModel):
    feedback: str


# Persistence Models
class SaveProposalRequest(BaseModel):
    """Request model for saving a finished proposal."""

    title: Optional[str] = None
    content: Optional[str] = Field(
        None, validation_alias=AliasChoices("content", "proposal")
    )
    feedback: Optional[str] = None


class ProposalRecord(BaseModel):
    """A persisted proposal snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    content: str
    feedback: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class ProposalListResponse(BaseModel):
    proposals: List[ProposalRecord]


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    details: Optional[str] = None
    error_code: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: datetime
    version: Optional[str] = None
