"""Endpoint tests for the FastAPI application."""

import pytest

from app.core.exceptions import PersistenceError
from app.services.proposal_service import ProposalService

from conftest import DRAFT


class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health(self, client):
        assert client.get("/health").json()["version"] == "1.0.0"


class TestAIEndpoint:

    def test_critique(self, client, patched_llm):
        response = client.post("/ai", json={"draft": DRAFT, "stage": "critique"})
        assert response.status_code == 200

        sections = response.json()["sections"]
        assert list(sections) == [
            "opening_hook",
            "impact_statement",
            "mission_statement",
            "goals_objectives",
            "budget_justification",
        ]
        hook = sections["opening_hook"]
        assert hook["name"] == "Opening Hook"
        assert hook["needsWork"] is True
        assert hook["content"] == "Every child deserves a safe place to learn."

    def test_legacy_field_names(self, client, patched_llm):
        response = client.post("/ai", json={"text": DRAFT, "action": "critique"})
        assert response.status_code == 200
        assert "opening_hook" in response.json()["sections"]

    def test_improve_single_section(self, client, patched_llm):
        response = client.post(
            "/ai", json={"draft": DRAFT, "stage": "improve", "section": "Opening Hook"}
        )
        assert response.status_code == 200
        assert response.json()["options"] == [
            "Opening Hook rewritten directly.",
            "Opening Hook rewritten in detail.",
        ]

    def test_improve_several_sections(self, client, patched_llm):
        response = client.post(
            "/ai",
            json={"draft": DRAFT, "stage": "improve", "sections": ["Opening Hook", "Mission Statement"]},
        )
        body = response.json()
        assert set(body["improvements"]) == {"opening_hook", "mission_statement"}
        assert body["failures"] == {}

    def test_section_and_sections_with_the_same_key(self, client, patched_llm):
        response = client.post(
            "/ai",
            json={"draft": DRAFT, "stage": "improve", "section": "Opening Hook", "sections": ["opening hook"]},
        )
        assert response.status_code == 200
        assert list(response.json()["improvements"]) == ["opening_hook"]
        assert len(patched_llm.prompts) == 1

    def test_improve_without_section(self, client, patched_llm):
        response = client.post("/ai", json={"draft": DRAFT, "stage": "improve"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "validation_error"
        assert patched_llm.prompts == []

    def test_final_review(self, client, patched_llm):
        response = client.post("/ai", json={"draft": DRAFT, "stage": "final"})
        assert response.status_code == 200
        assert response.json() == {"feedback": "## Overall Assessment\nA compelling proposal."}

    @pytest.mark.parametrize("payload", [
        {"stage": "critique"},
        {"draft": "", "stage": "critique"},
        {"draft": "``` ```", "stage": "final"},
    ])
    def test_empty_draft_rejected_before_upstream(self, client, patched_llm, payload):
        response = client.post("/ai", json=payload)
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "empty_input"
        assert body["error"]
        assert patched_llm.prompts == []

    def test_unknown_stage(self, client, patched_llm):
        response = client.post("/ai", json={"draft": DRAFT, "stage": "rewrite"})
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"

    def test_upstream_failure_is_reported(self, client, monkeypatch, scripted_llm):
        from app.graphs.llm_helper import proposal_llm

        llm = scripted_llm(lambda prompt: RuntimeError("API key not valid"))
        monkeypatch.setattr(proposal_llm, "get_node_llm", lambda node_name: llm)

        response = client.post("/ai", json={"draft": DRAFT, "stage": "critique"})
        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "Failed to process with AI"
        assert body["details"] == "API key not valid"

    def test_malformed_improvements(self, client, monkeypatch, scripted_llm):
        from app.graphs.llm_helper import proposal_llm

        llm = scripted_llm(lambda prompt: "Option 1: just one")
        monkeypatch.setattr(proposal_llm, "get_node_llm", lambda node_name: llm)

        response = client.post(
            "/ai", json={"draft": DRAFT, "stage": "improve", "section": "Opening Hook"}
        )
        assert response.status_code == 502
        assert response.json()["error_code"] == "all_improvements_failed"


class TestProposalStore:

    def test_save_and_fetch(self, client):
        first = client.post("/save", json={"title": "First", "content": "## Opening Hook\nOne"})
        second = client.post(
            "/save", json={"content": "## Opening Hook\nTwo", "feedback": "Looks good"}
        )
        assert first.status_code == 200
        assert second.status_code == 200

        saved = second.json()
        assert saved["title"] == "Untitled Proposal"
        assert saved["feedback"] == "Looks good"
        assert saved["createdAt"]

        proposals = client.get("/fetch").json()["proposals"]
        assert [p["id"] for p in proposals] == [saved["id"], first.json()["id"]]

    def test_legacy_proposal_field(self, client):
        response = client.post("/save", json={"proposal": "Final text"})
        assert response.status_code == 200
        assert response.json()["content"] == "Final text"

    def test_save_requires_content(self, client):
        response = client.post("/save", json={"title": "Nothing"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"
        assert client.get("/fetch").json() == {"proposals": []}

    def test_get_single_proposal(self, client):
        saved = client.post("/save", json={"content": "Text"}).json()
        assert client.get(f"/proposals/{saved['id']}").json()["content"] == "Text"

        missing = client.get("/proposals/999999")
        assert missing.status_code == 404
        assert "not found" in missing.json()["error"]

    def test_fetch_degrades_to_empty_list(self, client, monkeypatch):
        def unavailable():
            raise PersistenceError("connection refused")

        monkeypatch.setattr(ProposalService, "list_proposals", staticmethod(unavailable))
        response = client.get("/fetch")
        assert response.status_code == 200
        assert response.json() == {"proposals": []}

    def test_save_failure_is_reported(self, client, monkeypatch):
        def broken(**kwargs):
            raise PersistenceError("disk full", message="Failed to save proposal")

        monkeypatch.setattr(ProposalService, "save_proposal", staticmethod(broken))
        response = client.post("/save", json={"content": "Text"})
        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to save proposal",
            "details": "disk full",
            "error_code": "persistence_error",
        }
