"""
Proposal pipeline for the Grant Proposal Assistant.

This package contains the section grammar, the critique, improvement and
final review steps, the draft assembler, and the workflow stage machine that
ties them together.
"""

from .assembler import KEEP_ORIGINAL, assemble_draft
from .critique import clean_draft, critique_draft
from .final_review import review_draft
from .improvement_graph import improve_sections, improvement_graph
from .prompts import CANONICAL_SECTIONS
from .section_parser import parse_critique, parse_draft_sections, section_key
from .workflow import ProposalWorkflow, WorkflowContext, WorkflowStage

__all__ = [
    "KEEP_ORIGINAL",
    "CANONICAL_SECTIONS",
    "assemble_draft",
    "clean_draft",
    "critique_draft",
    "review_draft",
    "improve_sections",
    "improvement_graph",
    "parse_critique",
    "parse_draft_sections",
    "section_key",
    "ProposalWorkflow",
    "WorkflowContext",
    "WorkflowStage",
]
