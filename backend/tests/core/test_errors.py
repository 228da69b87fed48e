"""
Tests for the API error boundary.

Every failure, whatever raised it, is rendered as the single error envelope
and carries the request's correlation ID.
"""

import uuid
from unittest.mock import MagicMock

import pytest

from apps.core.errors import error_body
from apps.core.exceptions import DuplicateError, ScopeViolationError
from apps.core.middleware import CORRELATION_ID_HEADER
from apps.projects.services import project_resource
from config.api import api
from tests.projects.factories import ProjectFactory


def assert_envelope(body: dict, code: str) -> dict:
    assert body["success"] is False
    error = body["error"]
    assert error["code"] == code
    assert error["message"]
    assert error["timestamp"]
    assert "requestId" in error
    return error


class TestErrorBody:
    def test_shape(self, request_factory) -> None:
        request = request_factory.get("/")
        request.correlation_id = uuid.UUID("550e8400-e29b-41d4-a716-446655440000")

        body = error_body(request, "NOT_FOUND", "Project not found")

        assert set(body) == {"success", "error"}
        assert set(body["error"]) == {"code", "message", "timestamp", "requestId"}
        assert body["error"]["requestId"] == "550e8400-e29b-41d4-a716-446655440000"

    def test_details_only_when_present(self, request_factory) -> None:
        body = error_body(request_factory.get("/"), "DUPLICATE_FIELD", "Taken", {"field": "name"})

        assert body["error"]["details"] == {"field": "name"}
        assert body["error"]["requestId"] is None


@pytest.mark.django_db
class TestErrorEnvelope:
    def test_not_found_carries_request_id(self, admin_client) -> None:
        request_id = "0b8e2a3c-6f1d-4c59-9a57-5d7a9a2f6e10"

        response = admin_client.get(
            f"/api/v1/projects/{uuid.uuid4()}",
            headers={CORRELATION_ID_HEADER: request_id},
        )

        assert response.status_code == 404
        error = assert_envelope(response.json(), "NOT_FOUND")
        assert error["message"] == "Project not found"
        assert error["requestId"] == request_id
        assert response[CORRELATION_ID_HEADER] == request_id

    def test_request_validation_is_400(self, admin_client) -> None:
        response = admin_client.post(
            "/api/v1/timesheets",
            {"start_date": "not-a-date", "end_date": "2025-03-09"},
            content_type="application/json",
        )

        assert response.status_code == 400
        error = assert_envelope(response.json(), "VALIDATION_ERROR")
        assert error["details"]["errors"]
        assert "start_date" in error["details"]["errors"][0]["field"]

    def test_app_error_details_include_field(self, admin_client, company, monkeypatch) -> None:
        monkeypatch.setattr(
            project_resource,
            "stats",
            MagicMock(side_effect=DuplicateError("Already there", field="title")),
        )
        project = ProjectFactory.create(company=company)

        response = admin_client.get(f"/api/v1/projects/{project.pk}/stats")

        assert response.status_code == 400
        error = assert_envelope(response.json(), "DUPLICATE_FIELD")
        assert error["details"] == {"field": "title"}

    def test_scope_violation_is_generic_500(self, admin_client, monkeypatch) -> None:
        monkeypatch.setattr(
            project_resource,
            "stats",
            MagicMock(side_effect=ScopeViolationError(details={"model": "Project", "lookup": "company_id"})),
        )

        response = admin_client.get(f"/api/v1/projects/{uuid.uuid4()}/stats")

        assert response.status_code == 500
        error = assert_envelope(response.json(), "SERVER_ERROR")
        assert error["message"] == "Server Error"
        assert "details" not in error

    def test_unexpected_exception_hides_internals(self, admin_client, monkeypatch) -> None:
        monkeypatch.setattr(project_resource, "stats", MagicMock(side_effect=RuntimeError("db password is hunter2")))

        response = admin_client.get(f"/api/v1/projects/{uuid.uuid4()}/stats")

        assert response.status_code == 500
        error = assert_envelope(response.json(), "SERVER_ERROR")
        assert "hunter2" not in response.content.decode()
        assert error["message"] == "Server Error"



class TestDocumentedErrors:
    def test_record_routes_declare_not_found(self) -> None:
        paths = api.get_openapi_schema(path_prefix="/api/v1")["paths"]

        missing = [
            f"{method.upper()} {path}"
            for path, operations in paths.items()
            if "{" in path
            for method, operation in operations.items()
            if "404" not in {str(code) for code in operation["responses"]}
        ]
        assert missing == []

    def test_error_responses_use_the_envelope(self) -> None:
        schema = api.get_openapi_schema(path_prefix="/api/v1")
        operation = schema["paths"]["/api/v1/projects/{project_id}"]["put"]

        documented = {str(code): response for code, response in operation["responses"].items()}
        assert {"200", "400", "403", "404"} <= set(documented)
        ref = documented["404"]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith("/ErrorResponse")
