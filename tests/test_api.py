"""HTTP-level tests for the FastAPI application."""

import json

import pytest
from fastapi.testclient import TestClient

from core.dependencies import get_orchestrator
from core.settings import AppSettings, FigmaSettings, LLMSettings, ServiceSettings
from main import create_app
from pipeline.core.exceptions import UpstreamFetchError, UpstreamModelError
from pipeline.models.dto import ChatCompletion
from pipeline.orchestrator import RequestOrchestrator

DOCUMENT = {
    "type": "DOCUMENT",
    "children": [
        {
            "type": "FRAME",
            "name": "Welcome",
            "children": [{"type": "TEXT", "characters": "Let's go"}],
        }
    ],
}

FLOW_BODY = {
    "diagramPayload": {
        "steps": [{"stepId": "1:2", "label": "Open app"}],
        "connectors": [],
        "freeText": [],
    }
}


class FakeFigma:
    configured = True

    def __init__(self, error=None):
        self.error = error

    async def fetch_document(self, file_key):
        if self.error:
            raise self.error
        return DOCUMENT


class FakeLLM:
    configured = True

    def __init__(self, content="[]", error=None):
        self.content = content
        self.error = error
        self.calls = 0
        self.prompts = []

    async def complete(self, instruction, content, *, temperature, max_tokens):
        self.calls += 1
        self.prompts.append(content)
        if self.error:
            raise self.error
        return ChatCompletion(content=self.content, total_tokens=10, model="m")


def make_settings(**app_overrides) -> ServiceSettings:
    return ServiceSettings(
        figma=FigmaSettings(FIGMA_TOKEN="figd_test", FIGMA_API_BASE_URL="https://figma.test/v1"),
        llm=LLMSettings(OPENAI_API_KEY="sk-test", OPENAI_BASE_URL="https://llm.test/v1"),
        app=AppSettings(LOG_JSON=False, **app_overrides),
    )


def make_client(figma=None, llm=None, **app_overrides):
    app = create_app(make_settings(**app_overrides))
    orchestrator = RequestOrchestrator(
        figma or FakeFigma(),
        llm or FakeLLM(),
        search_fallback_sentinel=app.state.settings.app.SEARCH_FALLBACK_SENTINEL,
    )
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.state.orchestrator = orchestrator
    return TestClient(app)


class TestSearchEndpoint:
    """Tests for POST /search."""

    def test_returns_model_results(self):
        answer = [{"name": "Welcome", "reason": "Onboarding", "confidence": "High"}]
        client = make_client(llm=FakeLLM(content="```json\n" + json.dumps(answer) + "\n```"))

        response = client.post("/search", json={"query": "onboarding", "fileKey": "AbC"})

        assert response.status_code == 200
        assert response.json() == answer

    def test_missing_file_key(self):
        llm = FakeLLM()
        client = make_client(llm=llm)

        response = client.post("/search", json={"query": "onboarding"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing query or fileKey"}
        assert response.headers["X-Error-Code"] == "CLIENT_INPUT_ERROR"
        assert llm.calls == 0

    def test_no_body(self):
        response = make_client().post("/search")

        assert response.status_code == 400
        assert response.json() == {"error": "Missing query or fileKey"}

    def test_figma_status_is_mirrored(self):
        error = UpstreamFetchError("http_error", "Figma API error: Not found", upstream_status=404)
        client = make_client(figma=FakeFigma(error=error))

        response = client.post("/search", json={"query": "q", "fileKey": "missing"})

        assert response.status_code == 404
        assert response.json() == {"error": "Figma API error: Not found"}

    def test_invalid_model_output_is_502(self):
        client = make_client(llm=FakeLLM(content="Sorry, I can't help"))

        response = client.post("/search", json={"query": "q", "fileKey": "AbC"})

        assert response.status_code == 502
        assert response.json() == {"error": "Invalid JSON from LLM, please retry."}

    def test_sentinel_fallback_enabled(self):
        client = make_client(
            llm=FakeLLM(content="Sorry, I can't help"), SEARCH_FALLBACK_SENTINEL=True
        )

        response = client.post("/search", json={"query": "q", "fileKey": "AbC"})

        assert response.status_code == 200
        assert response.json()[0]["name"] == "Error"
        assert response.json()[0]["confidence"] == "Low"


class TestFlowAnalyzeEndpoint:
    """Tests for POST /flow-analyze."""

    def test_returns_model_object(self):
        answer = {"context": "Food delivery", "goal": "Order dinner", "steps": []}
        client = make_client(llm=FakeLLM(content=json.dumps(answer)))

        response = client.post("/flow-analyze", json=FLOW_BODY)

        assert response.status_code == 200
        assert response.json() == answer

    def test_missing_payload_exact_body(self):
        response = make_client().post("/flow-analyze", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "No diagramPayload provided"}

    def test_no_body(self):
        response = make_client().post("/flow-analyze")

        assert response.status_code == 400
        assert response.json() == {"error": "No diagramPayload provided"}

    def test_malformed_payload(self):
        response = make_client().post(
            "/flow-analyze", json={"diagramPayload": {"steps": "not a list"}}
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request:")

    @pytest.mark.parametrize(
        "connector",
        [{"from": "1:2", "to": None}, {"from": "1:2"}, {}],
    )
    def test_unattached_connector_accepted(self, connector):
        llm = FakeLLM(content="{}")
        client = make_client(llm=llm)
        body = {
            "diagramPayload": {
                "steps": [{"stepId": "1:2", "label": "Open app"}],
                "connectors": [connector],
                "freeText": [],
            }
        }

        response = client.post("/flow-analyze", json=body)

        assert response.status_code == 200
        assert "-> ?" in llm.prompts[0]

    def test_unlabelled_step_accepted(self):
        client = make_client(llm=FakeLLM(content="{}"))
        body = {
            "diagramPayload": {
                "steps": [{"stepId": "1:2", "label": None}],
                "connectors": [],
                "freeText": [],
            }
        }

        response = client.post("/flow-analyze", json=body)

        assert response.status_code == 200

    def test_array_answer_is_502(self):
        client = make_client(llm=FakeLLM(content="[]"))

        response = client.post("/flow-analyze", json=FLOW_BODY)

        assert response.status_code == 502
        assert response.json() == {"error": "Unexpected response shape from LLM, please retry."}

    def test_model_failure_is_502(self):
        client = make_client(llm=FakeLLM(error=UpstreamModelError("timeout")))

        response = client.post("/flow-analyze", json=FLOW_BODY)

        assert response.status_code == 502
        assert response.json() == {"error": "LLM analysis failed, please retry."}
        assert response.headers["X-Error-Code"] == "LLM_TIMEOUT"


class TestServiceRoutes:
    """Tests for root, health, tracing and generic errors."""

    def test_root_text(self):
        response = make_client().get("/")

        assert response.status_code == 200
        assert response.text == "Hello from your MCP!"

    def test_health(self):
        response = make_client().get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["figma_configured"] is True

    def test_health_without_orchestrator(self):
        app = create_app(make_settings())
        app.state.orchestrator = None

        response = TestClient(app).get("/health")

        assert response.status_code == 503

    def test_trace_id_generated(self):
        response = make_client().get("/")

        assert response.headers.get("X-Trace-ID")

    def test_trace_id_reused(self):
        response = make_client().post(
            "/flow-analyze", json={}, headers={"X-Trace-ID": "plugin-123"}
        )

        assert response.headers["X-Trace-ID"] == "plugin-123"

    def test_unknown_route_is_json_error(self):
        response = make_client().get("/nope")

        assert response.status_code == 404
        assert "error" in response.json()

    def test_unexpected_error_keeps_cors_headers(self):
        app = create_app(make_settings())

        async def explode():
            raise RuntimeError("boom")

        app.add_api_route("/explode", explode)
        client = TestClient(app)

        response = client.get("/explode", headers={"Origin": "https://www.figma.com"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["X-Error-Code"] == "INTERNAL_SERVER_ERROR"
        assert response.headers.get("X-Trace-ID")

    def test_uninitialized_service_is_503(self):
        app = create_app(make_settings())

        response = TestClient(app).post("/search", json={"query": "q", "fileKey": "k"})

        assert response.status_code == 503
        assert response.json() == {"error": "Service not initialized"}


class TestStartupValidation:
    """Tests for settings validation in create_app()."""

    def test_bad_url_refuses_to_start(self):
        settings = make_settings()
        settings.llm.OPENAI_BASE_URL = "not-a-url"

        with pytest.raises(RuntimeError):
            create_app(settings)


class TestOpenAPI:
    """Tests for the generated OpenAPI document."""

    def test_validation_errors_documented_as_400(self):
        schema = make_client().get("/openapi.json").json()

        for path in ("/search", "/flow-analyze"):
            responses = schema["paths"][path]["post"]["responses"]
            assert "422" not in responses
            assert "400" in responses

        assert "HTTPValidationError" not in schema["components"]["schemas"]
