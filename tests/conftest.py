# tests/conftest.py

"""
Pytest Fixtures - Shared test configurations and data for models, scoring and APIs

The Snowflake repositories are swapped for in-memory fakes through FastAPI
dependency overrides, and the Redis cache is disabled, so the suite runs
without external services.
"""

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from formbuilder.core.dependencies import get_form_repository, get_response_repository
from formbuilder.main import app


# =============================================================================
# IN-MEMORY REPOSITORIES
# =============================================================================

class InMemoryFormRepository:
    """Dict-backed stand-in for FormRepository."""

    def __init__(self):
        self.forms: Dict[UUID, Dict[str, Any]] = {}

    def create(self, title, questions, description=None, header_image=None, created_by=None):
        now = datetime.now(timezone.utc)
        form_id = uuid4()
        self.forms[form_id] = {
            "id": form_id,
            "title": title,
            "description": description,
            "header_image": header_image,
            "questions": copy.deepcopy(questions),
            "is_published": False,
            "share_id": str(uuid4()),
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        return self.get_by_id(form_id)

    def get_by_id(self, form_id) -> Optional[Dict[str, Any]]:
        form = self.forms.get(UUID(str(form_id)))
        return copy.deepcopy(form) if form else None

    def get_by_share_id(self, share_id: str) -> Optional[Dict[str, Any]]:
        for form in self.forms.values():
            if form["share_id"] == share_id and form["is_published"]:
                return copy.deepcopy(form)
        return None

    def get_all(self, page=1, page_size=20, is_published=None) -> Tuple[List[Dict[str, Any]], int]:
        forms = [
            f for f in self.forms.values()
            if is_published is None or f["is_published"] == is_published
        ]
        forms.sort(key=lambda f: f["created_at"], reverse=True)
        start = (page - 1) * page_size
        return copy.deepcopy(forms[start:start + page_size]), len(forms)

    def update(self, form_id, title, questions, description=None, header_image=None):
        form = self.forms.get(UUID(str(form_id)))
        if not form:
            return None
        form.update(
            title=title,
            questions=copy.deepcopy(questions),
            description=description,
            header_image=header_image,
            updated_at=datetime.now(timezone.utc),
        )
        return self.get_by_id(form_id)

    def set_published(self, form_id, is_published):
        form = self.forms.get(UUID(str(form_id)))
        if not form:
            return None
        form["is_published"] = is_published
        return self.get_by_id(form_id)

    def delete(self, form_id) -> bool:
        return self.forms.pop(UUID(str(form_id)), None) is not None

    def exists(self, form_id) -> bool:
        return UUID(str(form_id)) in self.forms


class InMemoryResponseRepository:
    """List-backed stand-in for ResponseRepository."""

    def __init__(self):
        self.responses: List[Dict[str, Any]] = []

    def create(self, form_id, answers, score, max_score, user_id=None, ip_address=None, user_agent=None):
        record = {
            "id": uuid4(),
            "form_id": form_id,
            "user_id": user_id,
            "answers": copy.deepcopy(answers),
            "score": score,
            "max_score": max_score,
            "submitted_at": datetime.now(timezone.utc),
            "ip_address": ip_address,
            "user_agent": user_agent,
        }
        self.responses.append(record)
        return copy.deepcopy(record)

    def get_by_id(self, response_id):
        for r in self.responses:
            if r["id"] == UUID(str(response_id)):
                return copy.deepcopy(r)
        return None

    def get_by_form(self, form_id, page=1, page_size=20):
        matches = [r for r in reversed(self.responses) if r["form_id"] == UUID(str(form_id))]
        start = (page - 1) * page_size
        return copy.deepcopy(matches[start:start + page_size]), len(matches)

    def get_by_user(self, user_id):
        return copy.deepcopy([r for r in reversed(self.responses) if r["user_id"] == user_id])


# =============================================================================
# FASTAPI TEST CLIENT FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Run every test with the cache unavailable."""
    monkeypatch.setattr("formbuilder.services.cache.get_cache", lambda: None)
    monkeypatch.setattr("formbuilder.routers.forms.get_cache", lambda: None)


@pytest.fixture
def form_repo():
    return InMemoryFormRepository()


@pytest.fixture
def response_repo():
    return InMemoryResponseRepository()


@pytest.fixture
def client(form_repo, response_repo):
    """TestClient wired to the in-memory repositories."""
    app.dependency_overrides[get_form_repository] = lambda: form_repo
    app.dependency_overrides[get_response_repository] = lambda: response_repo
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# QUESTION FIXTURES - match the worked scoring examples
# =============================================================================

@pytest.fixture
def comprehension_question():
    """One sub-question, correct option 2, worth 5 points."""
    return {
        "id": "q-comp",
        "type": "comprehension",
        "title": "Read the passage",
        "settings": {
            "passage": "The quick brown fox jumps over the lazy dog.",
            "questions": [
                {
                    "question": "What colour is the fox?",
                    "options": ["red", "grey", "brown"],
                    "correct_answer": 2,
                    "score": 5,
                }
            ],
        },
    }


@pytest.fixture
def cloze_question():
    """Two blanks worth 1 and 2 points."""
    return {
        "id": "q-cloze",
        "type": "cloze",
        "title": "Fill in the blanks",
        "settings": {
            "text": "The quick ___ fox jumps over the ___ dog.",
            "blanks": ["brown", "lazy"],
            "correct_answers": {"0": "brown", "1": "lazy"},
            "blank_scores": {"0": 1, "1": 2},
        },
    }


@pytest.fixture
def categorize_question():
    """Dog -> Animals (2 points), Red -> Colors (1 point)."""
    return {
        "id": "q-cat",
        "type": "categorize",
        "title": "Sort the words",
        "settings": {
            "items": ["Dog", "Red"],
            "categories": ["Animals", "Colors"],
            "correct_answers": {"0": 0, "1": 1},
            "item_scores": {"0": 2, "1": 1},
        },
    }


@pytest.fixture
def all_questions(comprehension_question, cloze_question, categorize_question):
    return [comprehension_question, cloze_question, categorize_question]


@pytest.fixture
def valid_form_data(all_questions):
    return {
        "title": "Reading check",
        "description": "Three question types",
        "questions": all_questions,
        "created_by": "admin@example.com",
    }


@pytest.fixture
def perfect_answers():
    """Full marks for all_questions (5 + 3 + 3 = 11)."""
    return [
        {"question_id": "q-comp", "question_type": "comprehension", "answer": {"0": 2}},
        {"question_id": "q-cloze", "question_type": "cloze", "answer": {"0": "Brown", "1": "LAZY"}},
        {
            "question_id": "q-cat",
            "question_type": "categorize",
            "answer": {"Animals": ["Dog"], "Colors": ["Red"]},
        },
    ]


@pytest.fixture
def stored_form(form_repo, valid_form_data):
    """A published form already in the repository."""
    form = form_repo.create(
        title=valid_form_data["title"],
        questions=valid_form_data["questions"],
        description=valid_form_data["description"],
        created_by=valid_form_data["created_by"],
    )
    return form_repo.set_published(form["id"], True)
