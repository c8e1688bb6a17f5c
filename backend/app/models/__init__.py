"""
__init__.py for models package
"""

from .schemas import *

__all__ = [
    "SectionRecord",
    "AIRequest",
    "CritiqueResponse",
    "ImprovementResponse",
    "FinalReviewResponse",
    "SaveProposalRequest",
    "ProposalRecord",
    "ProposalListResponse",
    "ErrorResponse",
    "HealthResponse",
]
