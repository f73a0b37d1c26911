import logging
from typing import Any, Awaitable, Callable, Dict, Optional
from .config import DEFAULT_OPENAI_ENDPOINT
from .errors import ExecutionError
from .schema import NodeSpec, ImplPython
from .exec_python import exec_python


CredResolver = Callable[[Optional[str], Optional[str]], Awaitable[Optional[Dict[str, Any]]]]


class Context:
    def __init__(
        self,
        http,
        logger: Optional[logging.Logger] = None,
        cred_resolver: Optional[CredResolver] = None,
        recorder=None,
        project_id: Optional[str] = None,
        spell: Optional[str] = None,
        endpoint: str = DEFAULT_OPENAI_ENDPOINT,
    ):
        self.http = http
        self.log = logger or logging.getLogger("spell_nodes")
        self.cred_resolver = cred_resolver
        self.recorder = recorder
        self.project_id = project_id
        self.spell = spell
        self.endpoint = endpoint


async def run_node(spec: NodeSpec, params: Dict[str, Any], inputs: Dict[str, Any], ctx: Context) -> Dict[str, Any]:
    creds = None
    if spec.auth and spec.auth.type != "none":
        if ctx.cred_resolver is None:
            raise ExecutionError(f"{spec.name} needs credentials but no resolver is configured")
        credential_id = params.get("credential_id") if isinstance(params, dict) else None
        creds = await ctx.cred_resolver(spec.auth.provider, credential_id)

    if isinstance(spec.impl, ImplPython):
        return await exec_python(spec, params, inputs, creds, ctx)

    raise ExecutionError(f"Unknown impl for {spec.name}")
