from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
import httpx
from typing import Optional
from spell_nodes.catalog import list_nodes, get_node
from spell_nodes.config import get_settings
from spell_nodes.errors import ConfigurationError, InputError, ResponseFormatError
from spell_nodes.request_log import recorder_from_settings
from spell_nodes.runtime import run_node, Context


router = APIRouter(prefix="/api/nodes")

_recorder = None


def get_recorder():
    global _recorder
    if _recorder is None:
        _recorder = recorder_from_settings(get_settings())
    return _recorder


def http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


@router.get("")
def api_list_nodes(category: Optional[str] = None):
    return list_nodes(category)


class RunIn(BaseModel):
    name: str
    version: Optional[str] = None
    params: dict = {}
    inputs: dict = {}
    credential_id: Optional[str] = None
    project_id: Optional[str] = None
    spell: Optional[str] = None


async def settings_cred_resolver(provider: Optional[str], credential_id: Optional[str]):
    key = get_settings().openai_api_key
    if (provider or "").lower() == "openai" and key:
        return {"openai_api_key": key}
    return {}


@router.post("/run")
async def api_run_node(body: RunIn):
    spec = get_node(body.name, body.version)
    if not spec:
        raise HTTPException(404, f"node {body.name} not found")

    settings = get_settings()
    async with http_client() as http:
        ctx = Context(
            http=http,
            cred_resolver=settings_cred_resolver,
            recorder=get_recorder(),
            project_id=body.project_id,
            spell=body.spell,
            endpoint=settings.openai_endpoint,
        )
        try:
            out = await run_node(spec, {**body.params, "credential_id": body.credential_id}, body.inputs, ctx)
        except (ConfigurationError, InputError, ResponseFormatError) as e:
            raise HTTPException(400, str(e))
        return {"outputs": out}


@router.get("/requests")
def api_list_requests(project_id: Optional[str] = None, limit: int = 50):
    return get_recorder().list_requests(project_id=project_id, limit=limit)
