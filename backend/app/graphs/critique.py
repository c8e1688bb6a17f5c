"""
Critique step: ask the model for per-section feedback on a draft and merge it
with the draft's own section text.
"""

import logging
from typing import Dict, Optional

from langchain_core.language_models import BaseChatModel

from app.core.exceptions import EmptyInput, NoSectionsParsed
from app.models.schemas import SectionRecord

from .llm_helper import generate_text
from .prompts import CRITIQUE_PROMPT
from .section_parser import parse_critique, parse_draft_sections

logger = logging.getLogger(__name__)


def clean_draft(text: Optional[str]) -> str:
    """Remove backticks and surrounding whitespace; reject drafts left empty."""
    if text is None:
        raise EmptyInput("Text content is required")
    cleaned = text.replace("`", "").strip()
    if not cleaned:
        raise EmptyInput()
    return cleaned


async def critique_draft(draft: str, llm: Optional[BaseChatModel] = None) -> Dict[str, SectionRecord]:
    """
    Critique a draft section by section.

    Returns section records keyed by section key, in the order the critique
    listed them, each with its content taken from the matching draft heading.
    """
    cleaned = clean_draft(draft)
    logger.info(f"Requesting critique for draft of {len(cleaned)} characters")

    response = await generate_text(CRITIQUE_PROMPT + "\n\n" + cleaned, "critique_node", llm)

    sections = parse_critique(response)
    contents = parse_draft_sections(cleaned)
    for key, record in sections.items():
        record.content = contents.get(key, "")

    if not sections:
        logger.warning("Critique response contained no '## ' sections")
        raise NoSectionsParsed("The AI response did not contain any recognizable sections")

    flagged = sum(1 for record in sections.values() if record.needs_work)
    logger.info(f"Critique parsed {len(sections)} sections, {flagged} need work")
    return sections
