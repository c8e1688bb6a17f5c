"""
Draft Assembler - rebuild a single draft from the chosen section versions.
"""

from typing import List, Mapping, Optional, Sequence, Union

from app.models.schemas import SectionRecord

from .prompts import CANONICAL_SECTIONS
from .section_parser import HEADING_MARKER, section_key

KEEP_ORIGINAL = "original"

Selection = Union[int, str, None]


def resolve_section_text(
    record: SectionRecord,
    options: Optional[Sequence[str]],
    selection: Selection,
) -> str:
    """Pick the chosen option text, falling back to the original content."""
    if selection is None or selection == KEEP_ORIGINAL or isinstance(selection, bool):
        return record.content
    if isinstance(selection, int) and options and 0 <= selection < len(options):
        return options[selection]
    return record.content


def assemble_draft(
    sections: Mapping[str, SectionRecord],
    improvements: Optional[Mapping[str, Sequence[str]]] = None,
    selections: Optional[Mapping[str, Selection]] = None,
    canonical_sections: List[str] = CANONICAL_SECTIONS,
) -> str:
    """
    Join the canonical sections, in canonical order, into one markdown draft.

    Sections missing from `sections` are skipped. Headings outside the
    canonical list never appear in the output.
    """
    improvements = improvements or {}
    selections = selections or {}

    blocks: List[str] = []
    for name in canonical_sections:
        key = section_key(name)
        record = sections.get(key)
        if record is None:
            continue
        text = resolve_section_text(record, improvements.get(key), selections.get(key))
        blocks.append(f"{HEADING_MARKER}{record.name}\n{text}")

    return "\n\n".join(blocks).rstrip()

