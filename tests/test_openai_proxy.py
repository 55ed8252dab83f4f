# =============================================
# File: tests/test_openai_proxy.py
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import requests
from fastapi.testclient import TestClient

from flamingo_proxy.config import get_settings
from flamingo_proxy.utils import upstream
from tests.fakes import SETTINGS, FakeSession, response


def _mount_client(monkeypatch, *responses):
    from flamingo_proxy.main import app

    monkeypatch.setitem(app.dependency_overrides, get_settings, lambda: SETTINGS)
    session = FakeSession(*responses)
    monkeypatch.setattr(upstream, "_session", session)
    return TestClient(app), session


def test_body_forwarded_with_bearer_and_reply_relayed(monkeypatch):
    upstream_raw = b'{"id":"chatcmpl-1","choices":[{"message":{"role":"assistant","content":"Hi"}}]}'
    client, session = _mount_client(monkeypatch, response(200, raw=upstream_raw))
    body = b'{"model":"gpt-4o-mini","messages":[{"role":"user","content":"Hi"}]}'

    r = client.post("/openai", content=body, headers={"Content-Type": "application/json"})

    assert r.status_code == 200
    assert r.content == upstream_raw
    call = session.calls[0]
    assert call.method == "POST"
    assert call.url == "https://api.openai.com/v1/chat/completions"
    assert call.headers == {"Authorization": "Bearer sk-test", "Content-Type": "application/json"}
    assert call.data == body


def test_upstream_error_status_and_body_pass_through(monkeypatch):
    raw = b'{"error":{"message":"you must provide a model parameter","type":"invalid_request_error"}}'
    client, _ = _mount_client(monkeypatch, response(400, raw=raw))
    r = client.post("/openai", json={"messages": []})
    assert r.status_code == 400
    assert r.content == raw


def test_same_upstream_response_relays_identically(monkeypatch):
    raw = b'{"a": 1,   "b": [true, null]}'
    client, _ = _mount_client(monkeypatch, response(200, raw=raw), response(200, raw=raw))
    first = client.post("/openai", json={})
    second = client.post("/openai", json={})
    assert first.content == second.content == raw


def test_transport_failure_is_500(monkeypatch):
    client, _ = _mount_client(monkeypatch, requests.ConnectionError("reset"))
    r = client.post("/openai", json={"model": "gpt-4o-mini", "messages": []})
    assert r.status_code == 500
    assert r.json() == {"error": "OpenAI proxy failure"}
