"""Tests for the progress API endpoints."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from fastapi.testclient import TestClient

from src.progress.models import ProgressStatus
from src.progress.schemas import LessonProgress, MeetsCriteria, ModuleProgress


NOW = datetime(2025, 3, 12, 15, 30, tzinfo=UTC)


def lesson_payload(**kwargs) -> dict:
    record = LessonProgress(
        user_id=uuid4(), module_id=uuid4(), lesson_id=uuid4(), **kwargs
    )
    return record.model_dump(mode="json")


def module_payload(**kwargs) -> dict:
    record = ModuleProgress(user_id=uuid4(), module_id=uuid4(), **kwargs)
    return record.model_dump(mode="json")


class TestTransitionEndpoints:
    """Tests for the transition routes."""

    def test_start_module(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/modules/transitions",
            json={"record": module_payload(), "target_status": "in_progress"},
        )
        assert response.status_code == 200
        updates = response.json()["updates"]
        assert updates["status"] == "in_progress"
        assert updates["version"] == 1
        assert updates["started_at"] is not None

    def test_rejected_transition_returns_409(self, client: TestClient) -> None:
        record = lesson_payload(
            status=ProgressStatus.IN_PROGRESS,
            completion_rate=100,
            meets_criteria=MeetsCriteria(
                view_all_content=True, pass_assessment=True, minimum_time_spent=True
            ),
        )
        response = client.post(
            "/v1/progress/lessons/transitions",
            json={"record": record, "target_status": "completed"},
        )
        assert response.status_code == 409
        data = response.json()
        assert data["error"] is True
        assert data["message"] == "Transition rejected"
        assert data["errors"] == ["Completion criterion not met: interaction_required"]

    def test_context_unlocks_module(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/modules/transitions",
            json={
                "record": module_payload(status=ProgressStatus.LOCKED),
                "target_status": "not_started",
                "context": {"prerequisites_met": True},
            },
        )
        assert response.status_code == 200
        assert response.json()["updates"]["unlocked_at"] is not None

    def test_unknown_status_is_422(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/modules/transitions",
            json={"record": module_payload(), "target_status": "archived"},
        )
        assert response.status_code == 422


class TestCalculationEndpoints:
    """Tests for percentage and completion routes."""

    def test_module_percentage(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/modules/percentage",
            json={"record": module_payload(lessons_completed=3, total_lessons=8)},
        )
        assert response.status_code == 200
        assert response.json() == {"percentage": 38}

    def test_lesson_percentage_with_weights(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/lessons/percentage",
            json={
                "record": lesson_payload(progress=30, assessment_score=90),
                "weights": {"content": 0, "time": 1, "assessments": 1, "interactions": 0},
            },
        )
        assert response.status_code == 200
        assert response.json()["percentage"] == 60

    def test_completion_check(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/lessons/completion-check",
            json={
                "lesson_progress": lesson_payload(time_spent=5),
                "criteria": {"minimum_time_spent": 10},
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["met"] is False
        assert data["missing"] == ["Spend at least 10 minutes"]
        assert data["meets_criteria"]["minimum_time_spent"] is False


class TestReportEndpoints:
    """Tests for report merging routes."""

    def test_lesson_report_with_criteria(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/lessons/report",
            json={
                "record": lesson_payload(time_spent=8),
                "update": {"time_spent": 4, "progress": 50},
                "criteria": {"minimum_time_spent": 10},
            },
        )
        assert response.status_code == 200
        updates = response.json()["updates"]
        assert updates["time_spent"] == 12
        assert updates["progress"] == 50
        assert updates["meets_criteria"]["minimum_time_spent"] is True
        assert "status" not in updates

    def test_module_report(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/modules/report",
            json={
                "record": module_payload(access_count=2),
                "update": {"lessons_completed": 4},
            },
        )
        assert response.status_code == 200
        updates = response.json()["updates"]
        assert updates["access_count"] == 3
        assert updates["lessons_completed"] == 4


class TestAnalyticsEndpoints:
    """Tests for streak and analytics routes."""

    def test_streak(self, client: TestClient, user_id) -> None:
        activities = [
            {
                "user_id": str(user_id),
                "type": "lesson_complete",
                "timestamp": (NOW - timedelta(days=offset)).isoformat(),
            }
            for offset in (0, 1, 2)
        ]
        response = client.post(
            "/v1/progress/streak",
            json={"activities": activities, "as_of": NOW.isoformat()},
        )
        assert response.status_code == 200
        assert response.json() == {
            "current": 3,
            "longest": 3,
            "last_date": "2025-03-12",
        }

    def test_analytics(self, client: TestClient, user_id) -> None:
        response = client.post(
            "/v1/progress/analytics",
            json={
                "activities": [
                    {
                        "user_id": str(user_id),
                        "type": "note_create",
                        "timestamp": NOW.isoformat(),
                    }
                ],
                "period": {"start": "2025-03-10", "end": "2025-03-12"},
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == str(user_id)
        assert data["notes_created"] == 1
        assert data["risk_level"] == "high"


class TestValidationEndpoint:
    """Tests for payload validation."""

    def test_valid_payload(self, client: TestClient) -> None:
        response = client.post("/v1/progress/validate/module", json=module_payload())
        assert response.status_code == 200
        assert response.json() == {"valid": True, "errors": []}

    def test_invalid_payload(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/validate/lesson",
            json={"user_id": str(uuid4()), "progress": 150},
        )
        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Invalid payload"
        assert any(error.startswith("progress: ") for error in data["errors"])

    def test_assessment_passed_must_match_score(self, client: TestClient) -> None:
        payload = {
            "user_id": str(uuid4()),
            "module_id": str(uuid4()),
            "assessment_id": str(uuid4()),
            "passing_score": 70,
            "score": 50,
        }
        response = client.post("/v1/progress/validate/assessment", json=payload)
        assert response.status_code == 200

        response = client.post(
            "/v1/progress/validate/assessment", json={**payload, "passed": True}
        )
        assert response.status_code == 400
        assert any(
            "passed must be False" in error for error in response.json()["errors"]
        )

    def test_unknown_kind(self, client: TestClient) -> None:
        response = client.post("/v1/progress/validate/course", json={})
        assert response.status_code == 404
