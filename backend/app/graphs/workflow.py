"""
Proposal Workflow - stage machine for the draft/critique/improve/review loop.

The workflow owns an explicit WorkflowContext (draft, stage, section map,
option sets, selections, assembled draft, final feedback) and only lets an
action run from the stages that allow it:

    initial -> analyzing -> sections_available -> improving
        -> improvements_available -> editing -> reviewing -> final_draft_available

From the end of the loop the user may re-critique the assembled draft or
reset to a fresh draft. Any failure leaves the previous stage in place and
is recorded in `context.error` so the step can be retried.
"""

import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from langchain_core.language_models import BaseChatModel
from pydantic import BaseModel

from app.core.exceptions import (
    InvalidTransition,
    ProposalAssistantError,
    ValidationError,
    WorkflowBusy,
)
from app.models.schemas import SectionRecord
from app.services.proposal_service import ProposalService

from .assembler import KEEP_ORIGINAL, assemble_draft
from .critique import clean_draft, critique_draft
from .final_review import review_draft
from .improvement_graph import improve_sections

logger = logging.getLogger(__name__)


class WorkflowStage(str, Enum):
    INITIAL = "initial"
    ANALYZING = "analyzing"
    SECTIONS_AVAILABLE = "sections_available"
    IMPROVING = "improving"
    IMPROVEMENTS_AVAILABLE = "improvements_available"
    EDITING = "editing"
    REVIEWING = "reviewing"
    FINAL_DRAFT_AVAILABLE = "final_draft_available"


class WorkflowContext(BaseModel):
    """Everything one proposal session has derived so far."""

    draft: str = ""
    stage: WorkflowStage = WorkflowStage.INITIAL

    # Critique
    sections: Dict[str, SectionRecord] = {}
    flagged: List[str] = []

    # Improvements
    improvements: Dict[str, List[str]] = {}
    improvement_failures: Dict[str, str] = {}
    selections: Dict[str, Union[int, str]] = {}

    # Assembly and review
    assembled_draft: Optional[str] = None
    final_feedback: Optional[str] = None

    loading: bool = False
    error: Optional[str] = None


class ProposalWorkflow:
    """Drives one proposal through the pipeline with guarded transitions."""

    def __init__(self, llm: Optional[BaseChatModel] = None, context: Optional[WorkflowContext] = None):
        self.llm = llm
        self.context = context or WorkflowContext()

    @property
    def stage(self) -> WorkflowStage:
        return self.context.stage

    def _require(self, *stages: WorkflowStage) -> None:
        if self.context.loading:
            raise WorkflowBusy()
        if self.context.stage not in stages:
            allowed = ", ".join(stage.value for stage in stages)
            raise InvalidTransition(
                f"Current stage is '{self.context.stage.value}', expected one of: {allowed}"
            )

    @asynccontextmanager
    async def _step(self, entering: WorkflowStage):
        """Run one outbound step; on failure restore the prior stage and record the error."""
        previous = self.context.stage
        self.context.loading = True
        self.context.stage = entering
        self.context.error = None
        logger.info(f"Workflow stage: {previous.value} -> {entering.value}")
        try:
            yield
        except ProposalAssistantError as e:
            self.context.stage = previous
            self.context.error = str(e)
            logger.warning(f"Workflow step '{entering.value}' failed: {e}")
            raise
        finally:
            self.context.loading = False

    def _fail(self, error: ProposalAssistantError) -> ProposalAssistantError:
        self.context.error = str(error)
        return error

    # 1. Critique
    async def analyze(self, draft: Optional[str] = None) -> Dict[str, SectionRecord]:
        """Critique the draft. Allowed once per draft, from the initial stage only."""
        self._require(WorkflowStage.INITIAL)
        if draft is not None:
            self.context.draft = draft

        try:
            cleaned = clean_draft(self.context.draft)
        except ProposalAssistantError as e:
            raise self._fail(e)

        async with self._step(WorkflowStage.ANALYZING):
            sections = await critique_draft(cleaned, self.llm)
            self.context.sections = sections
            self.context.flagged = []
            self.context.improvements = {}
            self.context.improvement_failures = {}
            self.context.selections = {}
            self.context.stage = WorkflowStage.SECTIONS_AVAILABLE
        return sections

    # 2. Section selection
    def flag_section(self, key: str, flagged: bool = True) -> List[str]:
        """Mark or unmark a section for improvement."""
        self._require(WorkflowStage.SECTIONS_AVAILABLE)
        if key not in self.context.sections:
            raise self._fail(ValidationError(f"Unknown section: {key}"))

        if flagged and key not in self.context.flagged:
            self.context.flagged.append(key)
        elif not flagged and key in self.context.flagged:
            self.context.flagged.remove(key)
        return list(self.context.flagged)

    # 3. Improvements
    async def request_improvements(self) -> Dict[str, List[str]]:
        self._require(WorkflowStage.SECTIONS_AVAILABLE)
        if not self.context.flagged:
            raise self._fail(InvalidTransition("Select at least one section to improve"))

        names = [self.context.sections[key].name for key in self.context.flagged]
        async with self._step(WorkflowStage.IMPROVING):
            improvements, failures = await improve_sections(self.context.draft, names, self.llm)
            self.context.improvements = improvements
            self.context.improvement_failures = failures
            self.context.selections = {}
            self.context.stage = WorkflowStage.IMPROVEMENTS_AVAILABLE
        return improvements

    # 4. Choose replacements
    def select_option(self, key: str, choice: Union[int, str]) -> None:
        """Record the replacement for a section: an option index or 'original'."""
        self._require(WorkflowStage.IMPROVEMENTS_AVAILABLE)
        if key not in self.context.sections:
            raise self._fail(ValidationError(f"Unknown section: {key}"))

        if choice != KEEP_ORIGINAL:
            options = self.context.improvements.get(key, [])
            if isinstance(choice, bool) or not isinstance(choice, int) or not 0 <= choice < len(options):
                raise self._fail(ValidationError(f"No option {choice!r} for section: {key}"))
        self.context.selections[key] = choice

    def assemble(self) -> str:
        """Build the draft from the current choices and open it for editing."""
        self._require(WorkflowStage.SECTIONS_AVAILABLE, WorkflowStage.IMPROVEMENTS_AVAILABLE)
        assembled = assemble_draft(
            self.context.sections, self.context.improvements, self.context.selections
        )
        if not assembled:
            raise self._fail(InvalidTransition("None of the proposal sections were found to assemble"))

        self.context.assembled_draft = assembled
        self.context.stage = WorkflowStage.EDITING
        self.context.error = None
        return assembled

    def edit(self, text: str) -> str:
        """Replace the assembled draft with a manually adjusted version."""
        self._require(WorkflowStage.EDITING)
        if not text or not text.strip():
            raise self._fail(ValidationError("Edited draft cannot be empty"))
        self.context.assembled_draft = text
        return text

    # 5. Final review
    async def review(self) -> str:
        self._require(WorkflowStage.EDITING)
        if not self.context.assembled_draft:
            raise self._fail(InvalidTransition("Assemble the draft before requesting a review"))

        async with self._step(WorkflowStage.REVIEWING):
            feedback = await review_draft(self.context.assembled_draft, self.llm)
            self.context.final_feedback = feedback
            self.context.stage = WorkflowStage.FINAL_DRAFT_AVAILABLE
        return feedback

    # 6. Loop back, start over, or save
    async def recritique(self) -> Dict[str, SectionRecord]:
        """
        Start a new critique round on the assembled draft.

        If the critique fails, the finished round (assembled draft, final
        feedback, stage) is restored so the re-critique can be retried.
        """
        self._require(WorkflowStage.REVIEWING, WorkflowStage.FINAL_DRAFT_AVAILABLE)
        previous = self.context.model_copy(deep=True)
        assembled = self.context.assembled_draft
        self.reset()
        try:
            return await self.analyze(assembled)
        except ProposalAssistantError as e:
            self.context = previous
            self.context.error = str(e)
            raise

    def reset(self) -> None:
        """Discard the draft and everything derived from it."""
        if self.context.loading:
            raise WorkflowBusy()
        self.context = WorkflowContext()
        logger.info("Workflow reset to initial stage")

    def save(self, title: Optional[str] = None) -> Dict[str, Any]:
        self._require(WorkflowStage.FINAL_DRAFT_AVAILABLE)
        try:
            return ProposalService.save_proposal(
                content=self.context.assembled_draft,
                title=title,
                feedback=self.context.final_feedback,
            )
        except ProposalAssistantError as e:
            raise self._fail(e)
