"""
Improvement Graph - Parallel Section Rewrites

For every section the user flagged, the graph sends one improvement prompt
and splits the reply into two alternative rewrites. Sections run as parallel
LangGraph branches (one Send per section) and are joined before the graph
ends. A branch that fails records its reason under the section key instead of
raising, so siblings are never cancelled.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from langchain_core.language_models import BaseChatModel
from langchain_core.runnables import RunnableConfig
from langgraph.graph import StateGraph, START, END
from langgraph.types import Send

from app.core.exceptions import (
    AllImprovementsFailed,
    MalformedImprovement,
    ProposalAssistantError,
    ValidationError,
)

from .critique import clean_draft
from .llm_helper import generate_text
from .prompts import build_improvement_prompt
from .section_parser import section_key
from .state import ImprovementState, SectionImprovementTask

logger = logging.getLogger(__name__)

OPTION_MARKER = re.compile(r"Option [12]:")


def split_options(text: str, section: str) -> List[str]:
    """
    Split a reply on the literal 'Option 1:' / 'Option 2:' markers.

    The text before the first marker is discarded. Pieces after a third
    marker, if the model repeated one, are ignored.
    """
    parts = OPTION_MARKER.split(text)
    if len(parts) < 3:
        raise MalformedImprovement(section)
    return [parts[1].strip(), parts[2].strip()]


async def improve_section_node(task: SectionImprovementTask, config: RunnableConfig) -> Dict:
    """Generate the option pair for one section."""
    section = task["section"]
    key = section_key(section)
    llm = (config.get("configurable") or {}).get("llm")

    try:
        reply = await generate_text(
            build_improvement_prompt(section, task["draft"]), "improvement_node", llm
        )
        options = split_options(reply, section)
    except ProposalAssistantError as e:
        logger.warning(f"Improvement failed for section '{section}': {e}")
        return {"failures": {key: str(e)}}

    logger.info(f"Generated improvement options for section '{section}'")
    return {"improvements": {key: options}}


def route_sections(state: ImprovementState) -> List[Send]:
    return [
        Send("improve_section", {"draft": state["draft"], "section": section})
        for section in state["sections"]
    ]


def create_improvement_graph():
    """
    Create and compile the improvement fan-out graph.

    Returns:
        Compiled StateGraph running one branch per requested section
    """
    workflow = StateGraph(ImprovementState)

    workflow.add_node("improve_section", improve_section_node)

    workflow.add_conditional_edges(START, route_sections, ["improve_section"])
    workflow.add_edge("improve_section", END)

    return workflow.compile()


async def improve_sections(
    draft: str,
    sections: List[str],
    llm: Optional[BaseChatModel] = None,
) -> Tuple[Dict[str, List[str]], Dict[str, str]]:
    """
    Produce two rewrite options for each requested section.

    Returns:
        (improvements, failures), both keyed by section key

    Raises:
        EmptyInput: the draft is empty after cleaning
        ValidationError: no section names were given
        AllImprovementsFailed: not a single section produced options
    """
    cleaned = clean_draft(draft)
    # One branch per section key; the first spelling of a heading wins
    unique = {}
    for name in sections or []:
        if name and name.strip():
            unique.setdefault(section_key(name.strip()), name.strip())
    names = list(unique.values())
    if not names:
        raise ValidationError("Sections are required for improvements")

    logger.info(f"Requesting improvements for {len(names)} sections")
    final_state = await improvement_graph.ainvoke(
        {"draft": cleaned, "sections": names, "improvements": {}, "failures": {}},
        config={"configurable": {"llm": llm}},
    )

    improvements = final_state.get("improvements", {})
    failures = final_state.get("failures", {})
    if not improvements:
        raise AllImprovementsFailed(failures)
    if failures:
        logger.warning(f"{len(failures)} of {len(names)} sections failed to improve")
    return improvements, failures


# Export the compiled graph
improvement_graph = create_improvement_graph()
