"""Tests for the markdown section grammar."""

import pytest

from app.graphs.prompts import CANONICAL_SECTIONS
from app.graphs.section_parser import (
    LineKind,
    classify_line,
    parse_critique,
    parse_draft_sections,
    section_key,
    split_sections,
)

from conftest import CRITIQUE_RESPONSE


class TestSectionKey:

    def test_canonical_keys(self):
        assert [section_key(name) for name in CANONICAL_SECTIONS] == [
            "opening_hook",
            "impact_statement",
            "mission_statement",
            "goals_objectives",
            "budget_justification",
        ]

    def test_canonical_keys_are_unique(self):
        keys = {section_key(name) for name in CANONICAL_SECTIONS}
        assert len(keys) == len(CANONICAL_SECTIONS)

    @pytest.mark.parametrize("name", CANONICAL_SECTIONS + ["Budget -- Justification!"])
    def test_idempotent(self, name):
        key = section_key(name)
        assert section_key(key) == key

    def test_runs_collapse_to_one_separator(self):
        assert section_key("Goals   &&  Objectives") == "goals_objectives"


class TestTokenizer:

    def test_classifies_lines(self):
        assert classify_line("  ## Opening Hook  ").kind is LineKind.HEADING
        assert classify_line("Status: YES").kind is LineKind.STATUS
        assert classify_line("Feedback: fine").kind is LineKind.FEEDBACK
        assert classify_line("   ").kind is LineKind.BLANK
        assert classify_line("Plain prose").kind is LineKind.BODY

    def test_deeper_headings_are_body(self):
        assert classify_line("### Detail").kind is LineKind.BODY
        assert classify_line("# Section Analysis").kind is LineKind.BODY

    def test_heading_value_is_trimmed(self):
        assert classify_line("## Opening Hook   ").value == "Opening Hook"


class TestDraftParsing:

    def test_draft_sections(self):
        draft = "## Opening Hook\nHello world\n## Impact Statement\nWe help."
        assert parse_draft_sections(draft) == {
            "opening_hook": "Hello world",
            "impact_statement": "We help.",
        }

    def test_empty_text_has_no_sections(self):
        assert parse_draft_sections("") == {}
        assert parse_critique("") == {}
        assert split_sections("") == []

    def test_text_before_first_heading_is_dropped(self):
        draft = "Preamble line\n\n## Opening Hook\nHello"
        assert parse_draft_sections(draft) == {"opening_hook": "Hello"}

    def test_body_keeps_inner_lines_and_trims_edges(self):
        draft = "## Opening Hook\n\n  First line\n\nSecond line\n\n"
        assert parse_draft_sections(draft)["opening_hook"] == "First line\n\nSecond line"

    def test_status_lines_in_a_draft_are_content(self):
        draft = "## Impact Statement\nStatus: we are growing"
        assert parse_draft_sections(draft)["impact_statement"] == "Status: we are growing"

    def test_inline_heading_marker_starts_new_section(self):
        draft = "## Opening Hook\nIntro\n## not really a heading"
        assert list(parse_draft_sections(draft)) == ["opening_hook", "not_really_a_heading"]


class TestCritiqueParsing:

    def test_single_block(self):
        records = parse_critique("## Opening Hook\nStatus: YES\nFeedback: too generic")
        record = records["opening_hook"]
        assert record.name == "Opening Hook"
        assert record.needs_work is True
        assert record.feedback == "too generic"
        assert record.content == ""

    def test_full_response(self):
        records = parse_critique(CRITIQUE_RESPONSE)
        assert list(records) == [
            "opening_hook",
            "impact_statement",
            "mission_statement",
            "goals_objectives",
            "budget_justification",
        ]
        assert [r.needs_work for r in records.values()] == [True, False, False, True, False]

    def test_multiline_feedback(self):
        records = parse_critique(CRITIQUE_RESPONSE)
        assert records["opening_hook"].feedback == (
            "The hook is too generic.\nName a specific child or moment."
        )

    @pytest.mark.parametrize("status", ["NO", "yes", "YES!", "[YES/NO]", ""])
    def test_only_literal_yes_needs_work(self, status):
        records = parse_critique(f"## Opening Hook\nStatus: {status}\nFeedback: x")
        assert records["opening_hook"].needs_work is False

    def test_status_is_trimmed(self):
        records = parse_critique("## Opening Hook\nStatus:    YES   ")
        assert records["opening_hook"].needs_work is True

    def test_lines_before_feedback_are_ignored(self):
        records = parse_critique("## Opening Hook\nSome chatter\nStatus: NO\nFeedback: ok\nmore")
        assert records["opening_hook"].feedback == "ok\nmore"

    def test_missing_status_and_feedback(self):
        records = parse_critique("## Opening Hook")
        assert records["opening_hook"].needs_work is False
        assert records["opening_hook"].feedback == ""

    def test_colliding_headings_overwrite(self):
        text = (
            "## Opening Hook\nStatus: NO\nFeedback: first\n"
            "## Impact Statement\nStatus: NO\nFeedback: impact\n"
            "## Opening   hook\nStatus: YES\nFeedback: second"
        )
        records = parse_critique(text)
        assert list(records) == ["opening_hook", "impact_statement"]
        assert records["opening_hook"].feedback == "second"
        assert records["opening_hook"].name == "Opening   hook"
