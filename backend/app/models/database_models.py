"""
SQLAlchemy models for storing finished grant proposals.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from app.core.database import Base

DEFAULT_PROPOSAL_TITLE = "Untitled Proposal"


class Proposal(Base):
    """
    An assembled final draft together with its holistic review.

    Rows are written once and never updated.
    """

    __tablename__ = "proposals"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, default=DEFAULT_PROPOSAL_TITLE)
    content = Column(Text, nullable=False)
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
