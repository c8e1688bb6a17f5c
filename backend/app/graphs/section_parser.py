"""
Section Parser - Markdown Section Grammar

Turns markdown-like text into ordered, key-addressable sections. The grammar
is deliberately small:

    line    := HEADING | STATUS | FEEDBACK | BODY | BLANK
    HEADING := "## " name           (after trimming the line)
    STATUS  := "Status:" value
    FEEDBACK:= "Feedback:" value

A tokenizer classifies each line, `split_sections` groups tokens under their
heading, and two reducers build the records used by the pipeline: one for the
critique response and one for the raw draft.

Known limitation: a `## ` line inside a paragraph always starts a new
section. The instruction templates never ask for nested headings.
"""

import re
from enum import Enum
from typing import Dict, List, NamedTuple, Tuple

from app.models.schemas import SectionRecord

HEADING_MARKER = "## "
STATUS_MARKER = "Status:"
FEEDBACK_MARKER = "Feedback:"
NEEDS_WORK_TOKEN = "YES"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class LineKind(str, Enum):
    HEADING = "heading"
    STATUS = "status"
    FEEDBACK = "feedback"
    BODY = "body"
    BLANK = "blank"


class Token(NamedTuple):
    kind: LineKind
    value: str  # marker-stripped, trimmed text
    raw: str  # the line exactly as it appeared


def section_key(name: str) -> str:
    """Derive the stable key for a heading, e.g. 'Goals & Objectives' -> 'goals_objectives'."""
    return _NON_ALNUM.sub("_", name.lower())


def classify_line(line: str) -> Token:
    stripped = line.strip()
    if stripped.startswith(HEADING_MARKER):
        return Token(LineKind.HEADING, stripped[len(HEADING_MARKER):].strip(), line)
    if not stripped:
        return Token(LineKind.BLANK, "", line)
    if stripped.startswith(STATUS_MARKER):
        return Token(LineKind.STATUS, stripped[len(STATUS_MARKER):].strip(), line)
    if stripped.startswith(FEEDBACK_MARKER):
        return Token(LineKind.FEEDBACK, stripped[len(FEEDBACK_MARKER):].strip(), line)
    return Token(LineKind.BODY, stripped, line)


def tokenize(text: str) -> List[Token]:
    if not text:
        return []
    return [classify_line(line) for line in text.split("\n")]


def split_sections(text: str) -> List[Tuple[str, List[Token]]]:
    """
    Group tokens under the heading that precedes them.

    Anything before the first heading is dropped.
    """
    sections: List[Tuple[str, List[Token]]] = []
    for token in tokenize(text):
        if token.kind is LineKind.HEADING:
            sections.append((token.value, []))
        elif sections:
            sections[-1][1].append(token)
    return sections


def parse_draft_sections(text: str) -> Dict[str, str]:
    """Map section key to the verbatim body text of that section in the draft."""
    contents: Dict[str, str] = {}
    for name, body in split_sections(text):
        contents[section_key(name)] = "\n".join(token.raw for token in body).strip()
    return contents


def _reduce_critique(name: str, body: List[Token]) -> SectionRecord:
    status = None
    feedback: List[str] = []
    collecting = False

    for token in body:
        if token.kind is LineKind.STATUS:
            status = token.value
        elif token.kind is LineKind.FEEDBACK:
            feedback = [token.value]
            collecting = True
        elif token.kind is LineKind.BODY and collecting:
            feedback.append(token.value)

    key = section_key(name)
    return SectionRecord(
        id=key,
        name=name,
        needs_work=status == NEEDS_WORK_TOKEN,
        feedback="\n".join(feedback).strip(),
    )


def parse_critique(text: str) -> Dict[str, SectionRecord]:
    """
    Parse a critique response into section records keyed by section key.

    Records carry name, needs_work and feedback; content is left empty for
    the caller to fill from the draft. Headings that normalize to the same
    key overwrite each other, keeping the position of the first.
    """
    records: Dict[str, SectionRecord] = {}
    for name, body in split_sections(text):
        record = _reduce_critique(name, body)
        records[record.id] = record
    return records
