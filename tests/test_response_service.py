# tests/test_response_service.py
"""
Response Service Tests - Form Builder API
tests/test_response_service.py

Scoring on submission, the scoring preview and fail-soft behaviour.
"""

from unittest.mock import MagicMock
from uuid import uuid4

from formbuilder.models.response import ResponseCreate, ScoreResult
from formbuilder.services.response_service import ResponseService


class TestScore:

    def test_scores_stored_form(self, form_repo, response_repo, stored_form, perfect_answers):
        service = ResponseService(form_repo, response_repo)
        result, breakdown = service.score(stored_form["id"], perfect_answers)
        assert result == ScoreResult(score=11, max_score=11)
        assert len(breakdown) == 3

    def test_missing_form_is_empty(self, form_repo, response_repo, perfect_answers):
        service = ResponseService(form_repo, response_repo)
        result, breakdown = service.score(uuid4(), perfect_answers)
        assert result == ScoreResult.empty()
        assert breakdown == []

    def test_repository_failure_is_empty(self, response_repo, perfect_answers):
        broken = MagicMock()
        broken.get_by_id.side_effect = RuntimeError("warehouse down")
        service = ResponseService(broken, response_repo)
        result, breakdown = service.score(uuid4(), perfect_answers)
        assert result == ScoreResult.empty()
        assert breakdown == []

    def test_unparseable_form_is_empty(self, response_repo, perfect_answers):
        repo = MagicMock()
        repo.get_by_id.return_value = {"id": uuid4(), "title": None}
        service = ResponseService(repo, response_repo)
        result, _ = service.score(uuid4(), perfect_answers)
        assert result == ScoreResult.empty()

    def test_trace_scoring_still_scores(self, form_repo, response_repo, stored_form, perfect_answers):
        service = ResponseService(form_repo, response_repo, trace_scoring=True)
        result, _ = service.score(stored_form["id"], perfect_answers)
        assert result.score == 11


class TestSubmit:

    def test_submission_persists_score(self, form_repo, response_repo, stored_form, perfect_answers):
        service = ResponseService(form_repo, response_repo)
        payload = ResponseCreate(form_id=stored_form["id"], user_id="u1", answers=perfect_answers)

        record = service.submit(payload, ip_address="10.0.0.1", user_agent="pytest")

        assert record.score == 11
        assert record.max_score == 11
        assert record.score_percentage == 100
        assert len(response_repo.responses) == 1
        saved = response_repo.responses[0]
        assert saved["ip_address"] == "10.0.0.1"
        assert saved["user_id"] == "u1"

    def test_only_sanitized_answers_stored(self, form_repo, response_repo, stored_form, perfect_answers):
        service = ResponseService(form_repo, response_repo)
        payload = ResponseCreate(
            form_id=stored_form["id"], answers=perfect_answers + ["junk", {"question_id": "x"}]
        )
        record = service.submit(payload)
        assert len(record.answers) == 3
        assert record.user_id is None

    def test_submission_survives_missing_form(self, form_repo, response_repo, perfect_answers):
        service = ResponseService(form_repo, response_repo)
        record = service.submit(ResponseCreate(form_id=uuid4(), answers=perfect_answers))
        assert (record.score, record.max_score) == (0, 0)
        assert len(response_repo.responses) == 1


class TestScoringPreview:

    def test_preview_does_not_persist(self, form_repo, response_repo, stored_form, perfect_answers):
        service = ResponseService(form_repo, response_repo)
        preview = service.test_scoring(stored_form["id"], perfect_answers)
        assert preview.result.score == 11
        assert [d.question_id for d in preview.breakdown] == ["q-comp", "q-cloze", "q-cat"]
        assert response_repo.responses == []


class TestStoredSettingsDefaults:

    def test_null_point_values_score_with_defaults(self, form_repo, response_repo):
        form = form_repo.create(title="T", questions=[{
            "id": "q1",
            "type": "categorize",
            "settings": {
                "items": ["Dog", "Red"],
                "categories": ["Animals", "Colors"],
                "correct_answers": {"0": 0, "1": None},
                "item_scores": {"0": None, "1": 2.5},
            },
        }])
        answers = [{"question_id": "q1", "question_type": "categorize",
                    "answer": {"Animals": ["Dog"], "Colors": ["Red"]}}]

        result, _ = ResponseService(form_repo, response_repo).score(form["id"], answers)
        assert result == ScoreResult(score=1, max_score=2)


class TestScoringEvents:

    def test_form_scored_emitted_on_submission_path(
        self, form_repo, response_repo, stored_form, perfect_answers, monkeypatch
    ):
        fake_logger = MagicMock()
        monkeypatch.setattr("formbuilder.services.response_service.logger", fake_logger)
        service = ResponseService(form_repo, response_repo, trace_scoring=True)

        service.submit(ResponseCreate(form_id=stored_form["id"], answers=perfect_answers))

        fake_logger.bind.assert_called_once_with(form_id=str(stored_form["id"]))
        fake_logger.bind.return_value.info.assert_called_once_with(
            "form_scored", question_count=3, score=11, max_score=11
        )
