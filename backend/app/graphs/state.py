"""
State definitions for the proposal improvement graph.

These TypedDicts are passed between LangGraph nodes. Result maps use a merge
reducer so that parallel section branches can each contribute their own key.
"""

from typing import Annotated, Dict, List, TypedDict


def merge_dicts(left: Dict, right: Dict) -> Dict:
    """Reducer combining per-branch results into one mapping."""
    return {**(left or {}), **(right or {})}


class ImprovementState(TypedDict):
    """
    State object for the improvement fan-out.

    One branch runs per requested section; every branch writes either an
    option pair or a failure reason under the section's key.
    """

    # Input fields
    draft: str  # Cleaned full draft used as context for every rewrite
    sections: List[str]  # Section names as flagged by the user

    # Results
    improvements: Annotated[Dict[str, List[str]], merge_dicts]  # key -> [option 1, option 2]
    failures: Annotated[Dict[str, str], merge_dicts]  # key -> reason


class SectionImprovementTask(TypedDict):
    """Payload sent to a single improvement branch."""

    draft: str
    section: str
