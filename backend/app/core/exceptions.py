"""
Error taxonomy for the proposal pipeline.

Every failure that can reach a user is one of these exceptions. Each class
carries the HTTP status and a stable error code so the API layer can render
it as an ErrorResponse without knowing where it was raised.
"""

from typing import Optional


class ProposalAssistantError(Exception):
    """Base class for all user-visible pipeline errors."""

    status_code: int = 500
    error_code: str = "proposal_assistant_error"
    message: str = "Request failed"

    def __init__(self, details: Optional[str] = None, message: Optional[str] = None):
        self.details = details
        if message:
            self.message = message
        super().__init__(details or self.message)


class ValidationError(ProposalAssistantError):
    """Missing or empty input; the user must correct the request."""

    status_code = 400
    error_code = "validation_error"
    message = "Invalid request"


class EmptyInput(ValidationError):
    error_code = "empty_input"
    message = "Text content is empty after cleaning"


class UpstreamEmpty(ProposalAssistantError):
    """The AI service answered with nothing."""

    status_code = 502
    error_code = "upstream_empty"
    message = "Empty response from AI"


class UpstreamError(ProposalAssistantError):
    """The AI service call itself failed."""

    status_code = 502
    error_code = "upstream_error"
    message = "Failed to process with AI"


class MalformedImprovement(ProposalAssistantError):
    """An improvement response did not contain both option markers."""

    status_code = 502
    error_code = "malformed_improvement"
    message = "Invalid improvement format"

    def __init__(self, section: str, details: Optional[str] = None):
        self.section = section
        super().__init__(details or f"Invalid improvement format for section: {section}")


class AllImprovementsFailed(ProposalAssistantError):
    status_code = 502
    error_code = "all_improvements_failed"
    message = "No improvement options could be generated"

    def __init__(self, failures: dict):
        self.failures = failures
        super().__init__("; ".join(f"{name}: {reason}" for name, reason in failures.items()))


class NoSectionsParsed(ProposalAssistantError):
    status_code = 502
    error_code = "no_sections_parsed"
    message = "No sections found in the critique"


class PersistenceError(ProposalAssistantError):
    """The proposal store is unreachable or a write failed."""

    status_code = 500
    error_code = "persistence_error"
    message = "Failed to access saved proposals"


class InvalidTransition(ProposalAssistantError):
    """A workflow action was attempted from a stage that does not allow it."""

    status_code = 409
    error_code = "invalid_transition"
    message = "Action not allowed at this stage"


class WorkflowBusy(InvalidTransition):
    error_code = "workflow_busy"
    message = "Another request is still in progress"
