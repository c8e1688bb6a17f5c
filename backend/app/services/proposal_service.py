"""
Service layer for persisting finished grant proposals.

Proposals are immutable snapshots: they can be created, listed and read,
never updated.
"""

from typing import List, Optional, Dict, Any
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from app.core.database import get_db_context
from app.core.exceptions import PersistenceError, ValidationError
from app.models.database_models import Proposal, DEFAULT_PROPOSAL_TITLE
import logging

logger = logging.getLogger(__name__)


def _to_dict(proposal: Proposal) -> Dict[str, Any]:
    return {
        "id": proposal.id,
        "title": proposal.title,
        "content": proposal.content,
        "feedback": proposal.feedback,
        "created_at": proposal.created_at,
    }


class ProposalService:
    """Service for saving and listing proposals."""

    @staticmethod
    def save_proposal(
        content: str,
        title: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Save a proposal and return the created record."""
        if not content or not content.strip():
            raise ValidationError("Proposal content is required")

        try:
            with get_db_context() as db:
                proposal = Proposal(
                    title=(title or "").strip() or DEFAULT_PROPOSAL_TITLE,
                    content=content,
                    feedback=feedback,
                )
                db.add(proposal)
                db.flush()
                db.refresh(proposal)
                return _to_dict(proposal)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save proposal: {e}")
            raise PersistenceError(str(e), message="Failed to save proposal") from e

    @staticmethod
    def list_proposals() -> List[Dict[str, Any]]:
        """List all proposals, newest first."""
        try:
            with get_db_context() as db:
                proposals = (
                    db.query(Proposal)
                    .order_by(desc(Proposal.created_at), desc(Proposal.id))
                    .all()
                )
                return [_to_dict(proposal) for proposal in proposals]
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch proposals: {e}")
            raise PersistenceError(str(e), message="Failed to fetch proposals") from e

    @staticmethod
    def get_proposal(proposal_id: int) -> Optional[Dict[str, Any]]:
        """Get a proposal by ID."""
        try:
            with get_db_context() as db:
                proposal = db.query(Proposal).filter(Proposal.id == proposal_id).first()
                return _to_dict(proposal) if proposal else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch proposal {proposal_id}: {e}")
            raise PersistenceError(str(e), message="Failed to fetch proposal") from e
