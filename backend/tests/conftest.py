"""Shared test fixtures for the Grant Proposal Assistant test suite."""

import os
import tempfile
from pathlib import Path

import pytest

# Settings and the database engine are created at import time, so the test
# environment has to be in place before anything under app/ is imported.
_TEST_DIR = Path(tempfile.mkdtemp(prefix="grant_proposals_test_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'test_proposals.db'}"
os.environ["GOOGLE_API_KEY"] = "test-key"
os.environ["ENVIRONMENT"] = "testing"

from langchain_core.messages import AIMessage  # noqa: E402

from app.core.database import create_tables, get_db_context  # noqa: E402
from app.models.database_models import Proposal  # noqa: E402


DRAFT = """## Opening Hook
Every child deserves a safe place to learn.

## Impact Statement
We served 300 families last year.

## Mission Statement
We build community learning hubs.

## Goals & Objectives
Open two new hubs by 2027.

## Budget Justification
Staff costs are 60% of the budget."""

CRITIQUE_RESPONSE = """# Section Analysis
For each section below, indicate if it needs improvement (YES/NO) and provide specific feedback:

## Opening Hook
Status: YES
Feedback: The hook is too generic.
Name a specific child or moment.

## Impact Statement
Status: NO
Feedback: Strong, concrete numbers.

## Mission Statement
Status: NO
Feedback: Clear and concise.

## Goals & Objectives
Status: YES
Feedback: Add measurable milestones.

## Budget Justification
Status: NO
Feedback: Well justified."""


def improvement_reply(section: str) -> str:
    return (
        f"Here are two approaches for {section}.\n\n"
        f"Option 1:\n{section} rewritten directly.\n\n"
        f"Option 2:\n{section} rewritten in detail.\n"
    )


class ScriptedChatModel:
    """
    Stand-in for a LangChain chat model.

    `responder` maps the prompt text to a reply string; returning an
    Exception instance makes the call raise it instead.
    """

    def __init__(self, responder):
        self.responder = responder
        self.prompts = []

    async def ainvoke(self, messages, config=None, **kwargs):
        prompt = messages[-1].content
        self.prompts.append(prompt)
        reply = self.responder(prompt)
        if isinstance(reply, Exception):
            raise reply
        return AIMessage(content=reply)


def pipeline_responder(prompt: str):
    """Answer each pipeline prompt the way a well-behaved model would."""
    if prompt.startswith("You are an expert grant writer"):
        return CRITIQUE_RESPONSE
    if prompt.startswith("Based on the critique provided"):
        section = prompt.split("improving this section: ", 1)[1].split(".\n", 1)[0]
        return improvement_reply(section)
    if prompt.startswith("Review this draft holistically"):
        return "## Overall Assessment\nA compelling proposal."
    return ""


@pytest.fixture
def fake_llm():
    return ScriptedChatModel(pipeline_responder)


@pytest.fixture
def scripted_llm():
    """Factory for a model with a custom responder."""
    return ScriptedChatModel


@pytest.fixture
def patched_llm(monkeypatch, fake_llm):
    """Route every pipeline node to the fake model."""
    from app.graphs.llm_helper import proposal_llm

    monkeypatch.setattr(proposal_llm, "get_node_llm", lambda node_name: fake_llm)
    return fake_llm


@pytest.fixture
def clean_db():
    """Empty proposals table backed by the temporary SQLite database."""
    create_tables()
    with get_db_context() as db:
        db.query(Proposal).delete()
    yield
    with get_db_context() as db:
        db.query(Proposal).delete()


@pytest.fixture
def client(clean_db):
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as test_client:
        yield test_client
