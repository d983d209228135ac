"""
Tests for the exception taxonomy and the global exception handlers
"""

from fastapi import FastAPI, status
from fastapi.testclient import TestClient
from pydantic import BaseModel

from invoiceai.exception_handlers import register_exception_handlers
from invoiceai.exceptions import (
    AuthenticationError,
    DuplicateResourceError,
    ForbiddenError,
    GenerationInvalidError,
    GenerationUpstreamError,
    InvoiceAIError,
    InvoiceNotFoundError,
    NoClientEmailError,
    NoTenantError,
    NotificationUpstreamError,
    ValidationError,
)


class TestExceptionTaxonomy:
    """Status codes and messages of the error kinds"""

    def test_base_defaults(self):
        """Test base error defaults"""
        exc = InvoiceAIError("Something broke")
        assert str(exc) == "Something broke"
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.errors is None
        assert exc.details == {}

    def test_access_errors(self):
        """Test authentication and authorization errors"""
        assert AuthenticationError().status_code == 401
        assert AuthenticationError().message == "Unauthorized"
        assert NoTenantError().status_code == 403
        assert ForbiddenError().status_code == 403
        assert ForbiddenError().message == "Access denied"

    def test_not_found(self):
        """Test not-found message and details"""
        exc = InvoiceNotFoundError("inv-1")
        assert exc.status_code == 404
        assert exc.message == "Invoice not found"
        assert exc.details == {"resource_type": "Invoice", "resource_id": "inv-1"}

    def test_validation_errors(self):
        """Test validation errors"""
        assert ValidationError("Description is required").status_code == 400
        assert isinstance(NoClientEmailError(), ValidationError)

    def test_conflict(self):
        """Test duplicate resource error"""
        assert DuplicateResourceError("taken").status_code == 409

    def test_upstream_errors_are_500(self):
        """Test upstream error status codes"""
        assert GenerationUpstreamError("timed out").status_code == 500
        assert NotificationUpstreamError().status_code == 500

    def test_generation_invalid_carries_errors(self):
        """Test that schema failures keep their error list"""
        errors = [{"field": "items", "message": "Field required", "type": "missing"}]
        exc = GenerationInvalidError(errors=errors)
        assert exc.errors == errors
        assert exc.status_code == 500


class Payload(BaseModel):
    count: int


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/not-found")
    async def not_found():
        raise InvoiceNotFoundError("inv-1")

    @app.get("/invalid")
    async def invalid():
        raise GenerationInvalidError(errors=[{"field": "items", "message": "Field required", "type": "missing"}])

    @app.post("/body")
    async def body(payload: Payload):
        return payload

    @app.get("/boom")
    async def boom():
        raise RuntimeError("database password is hunter2")

    return app


class TestExceptionHandlers:
    """Error body is {message, errors?}"""

    def test_application_error(self):
        """Test response for an application error"""
        response = TestClient(_app()).get("/not-found")

        assert response.status_code == 404
        assert response.json() == {"message": "Invoice not found"}

    def test_errors_list_is_included(self):
        """Test that errors are included in the body"""
        response = TestClient(_app()).get("/invalid")

        assert response.status_code == 500
        assert response.json()["errors"] == [{"field": "items", "message": "Field required", "type": "missing"}]

    def test_request_validation_is_400(self):
        """Test request validation response"""
        response = TestClient(_app()).post("/body", json={"count": "many"})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation error"
        assert body["errors"][0]["field"] == "count"

    def test_unknown_route(self):
        """Test 404 for an unknown route"""
        response = TestClient(_app()).get("/nowhere")

        assert response.status_code == 404
        assert response.json() == {"message": "Not Found"}

    def test_unhandled_exception_hides_details(self):
        """Test that unexpected errors do not leak internals"""
        client = TestClient(_app(), raise_server_exceptions=False)

        response = client.get("/boom")

        assert response.status_code == 500
        assert "hunter2" not in response.text
        assert response.json()["message"] == "An unexpected error occurred. Please try again later."
