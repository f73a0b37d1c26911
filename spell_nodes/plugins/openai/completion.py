import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from spell_nodes.config import DEFAULT_OPENAI_ENDPOINT
from spell_nodes.errors import ConfigurationError, InputError, ResponseFormatError
from spell_nodes.request_log import AuditRecorder, LoggingRecorder
from spell_nodes.schema import (
    CompletionHandlerInputData,
    CompletionResult,
    CompletionSettings,
    RequestRecord,
)


OPENAI_SECRET_KEY = "openai_api_key"
NO_CHOICES = "No choices returned"


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def _prompt(inputs: Dict[str, List[Any]]) -> Any:
    values = inputs.get("input")
    if values is None:
        raise InputError("no prompt: input slot 'input' is missing")
    # An empty slot sends no prompt
    return values[0] if values else None


def _total_tokens(body: Any) -> int:
    usage = body.get("usage") if isinstance(body, dict) else None
    if not isinstance(usage, dict) or usage.get("total_tokens") is None:
        raise ResponseFormatError("completion response has no usage.total_tokens")
    return usage["total_tokens"]


class CompletionRequester:
    """Sends one prompt to ``{endpoint}/completions`` and audits the exchange.

    Transport failures and non-2xx statuses come back as a failed
    :class:`CompletionResult`. Missing secrets, a missing prompt and a response
    without token usage raise instead.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        recorder: AuditRecorder,
        endpoint: str = DEFAULT_OPENAI_ENDPOINT,
        logger: Optional[logging.Logger] = None,
    ):
        self.http = http
        self.recorder = recorder
        self.endpoint = endpoint.rstrip("/")
        self.log = logger or logging.getLogger(__name__)

    async def execute(self, data) -> CompletionResult:
        if not isinstance(data, CompletionHandlerInputData):
            data = CompletionHandlerInputData.model_validate(data)
        node, context = data.node, data.context

        prompt = _prompt(data.inputs)
        settings = CompletionSettings.from_node_data(node.data, prompt)

        if context.module is None or context.module.secrets is None:
            raise ConfigurationError("ERROR: No secrets found")

        api_key = context.module.secrets.get(OPENAI_SECRET_KEY) or "null"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        payload = settings.payload()

        try:
            start = int(time.time() * 1000)
            resp = await self.http.post(f"{self.endpoint}/completions", json=payload, headers=headers)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, json.JSONDecodeError) as exc:
            self.log.error("completion request failed: %s", exc)
            return CompletionResult(success=False, error=str(exc))

        total_tokens = _total_tokens(body)

        params = _dumps(payload)
        self.recorder.record(
            RequestRecord(
                project_id=context.project_id,
                request_data=params,
                response_data=_dumps(body),
                start_time=start,
                status_code=resp.status_code,
                status=resp.reason_phrase,
                model=settings.model,
                parameters=params,
                total_tokens=total_tokens,
                spell=context.current_spell,
                node_id=node.id,
            )
        )

        choices = body.get("choices") or []
        if choices:
            choice = choices[0]
            self.log.debug("choice %s", choice)
            return CompletionResult(success=True, result=choice.get("text"))
        return CompletionResult(success=False, error=NO_CHOICES)


async def run(params, inputs, creds, ctx):
    params = dict(params or {})
    params.pop("credential_id", None)
    node_id = params.pop("node_id", None)
    slots = {k: v if isinstance(v, list) else [v] for k, v in (inputs or {}).items()}
    data = CompletionHandlerInputData(
        node={"id": node_id, "data": params},
        inputs=slots,
        context={"projectId": ctx.project_id, "currentSpell": ctx.spell, "module": {"secrets": creds}},
    )
    requester = CompletionRequester(ctx.http, ctx.recorder or LoggingRecorder(), ctx.endpoint, ctx.log)
    result = await requester.execute(data)
    return result.model_dump()
