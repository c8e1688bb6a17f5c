"""
Final review step: holistic narrative feedback on the assembled draft.
"""

import logging
from typing import Optional

from langchain_core.language_models import BaseChatModel

from .critique import clean_draft
from .llm_helper import generate_text
from .prompts import FINAL_REVIEW_PROMPT

logger = logging.getLogger(__name__)


async def review_draft(draft: str, llm: Optional[BaseChatModel] = None) -> str:
    """Return the model's review of the whole draft, unparsed."""
    cleaned = clean_draft(draft)
    logger.info(f"Requesting final review for draft of {len(cleaned)} characters")
    return await generate_text(FINAL_REVIEW_PROMPT + "\n\n" + cleaned, "final_review_node", llm)
