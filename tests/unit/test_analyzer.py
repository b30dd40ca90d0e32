"""Tests for the remote analyzer client using httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from riskscan.analyzer.client import NO_RESULT, RemoteAnalyzer
from riskscan.config import RiskScanConfig
from riskscan.errors import ConfigurationError, TransportError


def _completion(content: str | None) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _analyzer(handler, api_key: str = "sk-test") -> RemoteAnalyzer:
    config = RiskScanConfig(api_key=api_key, api_base="https://llm.test/v1/", model="gpt-test")
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RemoteAnalyzer(config, client=client)


def test_analyze_code_posts_chat_completion(run):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=_completion('{"findings": []}'))

    analyzer = _analyzer(handler)
    text = run(analyzer.analyze_code("x = 1\n", "/ws/app.py"))
    run(analyzer.aclose())

    assert text == '{"findings": []}'
    [request] = captured
    assert str(request.url) == "https://llm.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["model"] == "gpt-test"
    assert body["max_tokens"] == 700
    assert "File: /ws/app.py" in body["messages"][1]["content"]


def test_analyze_dependencies_lists_specifiers(run):
    captured: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(200, json=_completion('{"findings": []}'))

    analyzer = _analyzer(handler)
    run(analyzer.analyze_dependencies(["flask==2.0.1", "express@^4.18.2"]))

    prompt = captured[0]["messages"][1]["content"]
    assert "flask==2.0.1\nexpress@^4.18.2" in prompt
    assert captured[0]["max_tokens"] == 500


def test_missing_api_key_is_configuration_error(run):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    analyzer = _analyzer(handler, api_key="")
    with pytest.raises(ConfigurationError, match="API key"):
        run(analyzer.analyze_code("x", "a.py"))


def test_http_error_status_is_transport_error(run):
    analyzer = _analyzer(lambda request: httpx.Response(429, json={"error": "slow down"}))
    with pytest.raises(TransportError) as exc_info:
        run(analyzer.analyze_code("x", "a.py"))
    assert exc_info.value.status_code == 429


def test_connection_failure_is_transport_error(run):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    analyzer = _analyzer(handler)
    with pytest.raises(TransportError, match="ConnectError"):
        run(analyzer.analyze_dependencies(["flask"]))


def test_empty_completion_returns_placeholder(run):
    analyzer = _analyzer(lambda request: httpx.Response(200, json={"choices": []}))
    assert run(analyzer.analyze_code("x", "a.py")) == NO_RESULT


def test_null_content_returns_placeholder(run):
    analyzer = _analyzer(lambda request: httpx.Response(200, json=_completion(None)))
    assert run(analyzer.analyze_code("x", "a.py")) == NO_RESULT


@pytest.mark.parametrize("choices", [{"x": 1}, 7, "text"])
def test_non_list_choices_returns_placeholder(run, choices):
    analyzer = _analyzer(lambda request: httpx.Response(200, json={"choices": choices}))
    assert run(analyzer.analyze_code("x", "a.py")) == NO_RESULT
