import json

import httpx
import pytest


class FakeRecorder:
    def __init__(self):
        self.records = []

    def record(self, entry):
        self.records.append(entry)

    def list_requests(self, project_id=None, limit=50):
        return [r.model_dump() for r in self.records if project_id in (None, r.project_id)][:limit]


class TransportSpy:
    """Serves canned responses and remembers every request it saw."""

    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return self.response

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


def completion_body(choices, total_tokens=12):
    return {
        "id": "cmpl-1",
        "object": "text_completion",
        "model": "gpt-3.5-turbo-instruct",
        "choices": choices,
        "usage": {"prompt_tokens": 5, "completion_tokens": 7, "total_tokens": total_tokens},
    }


@pytest.fixture
def recorder():
    return FakeRecorder()


@pytest.fixture
def handler_data():
    return {
        "node": {"id": 7, "data": {"model": "gpt-3.5-turbo-instruct"}},
        "inputs": {"input": ["Once upon a time"]},
        "context": {
            "projectId": "proj-1",
            "currentSpell": "spell-1",
            "module": {"secrets": {"openai_api_key": "sk-test"}},
        },
    }
