import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import FakeRecorder, TransportSpy, completion_body
from hub import api_nodes
import webapp


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("OPENAI_ENDPOINT", "https://api.openai.test/v1/")
    recorder = FakeRecorder()
    monkeypatch.setattr(api_nodes, "_recorder", recorder)
    c = TestClient(webapp.app)
    c.recorder = recorder
    return c


def use_transport(monkeypatch, spy):
    monkeypatch.setattr(api_nodes, "http_client", spy.client)


def test_list_nodes(client):
    r = client.get("/api/nodes")
    assert r.status_code == 200
    assert r.json()[0]["name"] == "openai.completion"
    assert client.get("/api/nodes", params={"category": "Notion"}).json() == []


def test_run_completion(client, monkeypatch):
    spy = TransportSpy(httpx.Response(200, json=completion_body([{"text": " there"}])))
    use_transport(monkeypatch, spy)

    r = client.post(
        "/api/nodes/run",
        json={"name": "openai.completion", "params": {"model": "m"}, "inputs": {"input": ["hi"]}, "project_id": "p9"},
    )

    assert r.status_code == 200
    assert r.json() == {"outputs": {"success": True, "result": " there", "error": None}}
    assert str(spy.requests[0].url) == "https://api.openai.test/v1/completions"
    assert spy.requests[0].headers["Authorization"] == "Bearer sk-env"
    assert client.recorder.records[0].project_id == "p9"

    listed = client.get("/api/nodes/requests", params={"project_id": "p9"}).json()
    assert len(listed) == 1


def test_run_unknown_node(client):
    r = client.post("/api/nodes/run", json={"name": "openai.chat"})
    assert r.status_code == 404


def test_run_without_prompt_is_bad_request(client, monkeypatch):
    spy = TransportSpy(httpx.Response(200, json=completion_body([])))
    use_transport(monkeypatch, spy)

    r = client.post("/api/nodes/run", json={"name": "openai.completion", "inputs": {}})

    assert r.status_code == 400
    assert spy.requests == []


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
