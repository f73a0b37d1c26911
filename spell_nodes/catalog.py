from typing import List, Optional
from .schema import NodeSpec


COMPLETION_NODE = {
    "name": "openai.completion",
    "version": "1.0.0",
    "title": "Text Completion",
    "category": "OpenAI",
    "doc": "Complete the text in the `input` slot with the OpenAI completions API.",
    "auth": {"type": "token", "provider": "openai"},
    "inputs": {
        "input": {"type": "string", "required": True, "description": "Prompt text"},
    },
    "outputs": {
        "success": {"type": "boolean"},
        "result": {"type": "string"},
        "error": {"type": "string"},
    },
    "impl": {"type": "python", "module": "spell_nodes.plugins.openai.completion", "function": "run"},
}

_NODES: List[NodeSpec] = [NodeSpec(**COMPLETION_NODE)]


def list_nodes(category: Optional[str] = None) -> List[dict]:
    out: List[dict] = []
    for spec in _NODES:
        if category and spec.category != category:
            continue
        d = {"name": spec.name, "version": spec.version, "title": spec.title, "category": spec.category}
        if spec.doc:
            d["doc"] = spec.doc
        if spec.auth.provider == "openai":
            d["required_keys"] = ["OPENAI_API_KEY"]
        out.append(d)
    return out


def get_node(name: str, version: Optional[str] = None) -> Optional[NodeSpec]:
    matches = [s for s in _NODES if s.name == name and (version is None or s.version == version)]
    if not matches:
        return None
    return max(matches, key=lambda s: s.version)
