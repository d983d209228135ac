"""
Tests for request logging
"""

import json
import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from invoiceai.middleware.logging import (
    RequestIdFilter,
    StructuredFormatter,
    StructuredLoggingMiddleware,
    get_request_id,
)


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(StructuredLoggingMiddleware)

    @app.get("/ping")
    async def ping():
        return {"request_id": get_request_id()}

    return app


class TestStructuredLoggingMiddleware:
    def test_request_id_visible_inside_handler(self):
        """Test request id propagation"""
        response = TestClient(_app()).get("/ping", headers={"X-Request-ID": "abc"})

        assert response.json() == {"request_id": "abc"}
        assert response.headers["X-Request-ID"] == "abc"

    def test_access_log_line(self, caplog):
        """Test the access log record"""
        with caplog.at_level(logging.INFO, logger="invoiceai.access"):
            TestClient(_app()).get("/ping")

        records = [r for r in caplog.records if r.name == "invoiceai.access"]
        assert len(records) == 1
        assert records[0].method == "GET"
        assert records[0].path == "/ping"
        assert records[0].status_code == 200


class TestStructuredFormatter:
    def test_json_output(self):
        """Test JSON log formatting"""
        record = logging.LogRecord("invoiceai.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
        record.path = "/api/invoices"
        RequestIdFilter().filter(record)

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "hello world"
        assert data["level"] == "WARNING"
        assert data["path"] == "/api/invoices"
        assert data["request_id"] == ""
