"""
Tests for the error taxonomy and its JSON envelope.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from plantrack.core.errors import (
    AccessDenied,
    AlreadyMember,
    DuplicateEmail,
    InvalidCredential,
    InvalidInvite,
    NoOrganization,
    NotFound,
    OnboardingRequired,
    OperationFailed,
    PlanTrackError,
    ShareExpired,
    UnknownUser,
    ValidationFailed,
    error_body,
    register_exception_handlers,
)


class NamedPayload(BaseModel):
    name: str


class TestTaxonomy:
    @pytest.mark.parametrize(
        "exc_cls, status, code",
        [
            (InvalidCredential, 401, "INVALID_CREDENTIAL"),
            (UnknownUser, 401, "INVALID_CREDENTIAL"),
            (NoOrganization, 403, "NO_ORGANIZATION"),
            (OnboardingRequired, 400, "ONBOARDING_REQUIRED"),
            (AlreadyMember, 409, "ALREADY_MEMBER"),
            (InvalidInvite, 404, "INVALID_INVITE"),
            (AccessDenied, 403, "ACCESS_DENIED"),
            (DuplicateEmail, 400, "DUPLICATE_EMAIL"),
            (ValidationFailed, 400, "VALIDATION_FAILED"),
            (NotFound, 404, "NOT_FOUND"),
            (ShareExpired, 410, "SHARE_EXPIRED"),
            (OperationFailed, 500, "OPERATION_FAILED"),
        ],
    )
    def test_status_and_code(self, exc_cls, status, code):
        exc = exc_cls()
        assert isinstance(exc, PlanTrackError)
        assert exc.status_code == status
        assert exc.code == code

    def test_unknown_user_indistinguishable_on_the_wire(self):
        assert UnknownUser().message == InvalidCredential().message

    def test_custom_message(self):
        assert NotFound("Project not found").message == "Project not found"
        assert NotFound().message == "Not found"

    def test_envelope(self):
        assert error_body(404, "NOT_FOUND", "gone") == {
            "error": {"code": "NOT_FOUND", "message": "gone", "status": 404}
        }


class TestHandlers:
    def _make_app(self) -> FastAPI:
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/denied")
        async def denied():
            raise AccessDenied()

        @app.get("/boom")
        async def boom():
            raise RuntimeError("secret internal detail")

        @app.post("/body")
        async def body(payload: NamedPayload):
            return payload

        return app

    def test_taxonomy_error_rendered(self):
        resp = TestClient(self._make_app()).get("/denied")
        assert resp.status_code == 403
        assert resp.json() == {
            "error": {"code": "ACCESS_DENIED", "message": "Access denied", "status": 403}
        }

    def test_unhandled_error_is_opaque(self):
        client = TestClient(self._make_app(), raise_server_exceptions=False)
        resp = client.get("/boom")
        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "OPERATION_FAILED"
        assert "secret" not in resp.text

    def test_request_validation_uses_envelope(self):
        resp = TestClient(self._make_app()).post("/body", json={})
        assert resp.status_code == 400
        body = resp.json()["error"]
        assert body["code"] == "VALIDATION_FAILED"
        assert body["message"] == "name: Field required"
