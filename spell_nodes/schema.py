import math
import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Optional, Union


class IOField(BaseModel):
    type: Literal["string", "number", "boolean", "object", "array", "any"] = "string"
    required: bool = False
    default: Optional[Any] = None
    items: Optional["IOField"] = None
    description: Optional[str] = None


IOField.model_rebuild()


class AuthSpec(BaseModel):
    type: Literal["none", "token"] = "none"
    provider: Optional[str] = None


class ImplPython(BaseModel):
    type: Literal["python"] = "python"
    module: str
    function: str = "run"


class NodeSpec(BaseModel):
    name: str
    version: str = "1.0.0"
    title: str
    category: str
    doc: Optional[str] = None
    auth: AuthSpec = AuthSpec()
    inputs: Dict[str, IOField] = Field(default_factory=dict)
    outputs: Dict[str, IOField] = Field(default_factory=dict)
    impl: ImplPython

    @field_validator("name")
    @classmethod
    def name_must_have_dot(cls, v):
        if "." not in v:
            raise ValueError("name should be namespaced like provider.action")
        return v


# Handler input bundle, as handed over by the spell runner.


class NodeConfig(BaseModel):
    id: Optional[Union[int, str]] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class ModuleContext(BaseModel):
    secrets: Optional[Dict[str, Optional[str]]] = None


class SpellContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: Optional[str] = Field(default=None, alias="projectId")
    current_spell: Optional[str] = Field(default=None, alias="currentSpell")
    module: Optional[ModuleContext] = None


class CompletionHandlerInputData(BaseModel):
    node: NodeConfig = Field(default_factory=NodeConfig)
    inputs: Dict[str, List[Any]] = Field(default_factory=dict)
    context: SpellContext = Field(default_factory=SpellContext)


_FLOAT_PREFIX_RE = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_float(value: Any) -> float:
    """Parse like a lenient float reader: use the leading numeric prefix, NaN if there is none.

    ``"1.5abc"`` gives ``1.5``, ``"abc"`` and ``""`` give ``nan``. Booleans are not numbers here.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    m = _FLOAT_PREFIX_RE.match(str(value).lstrip())
    if not m:
        return math.nan
    return float(m.group(0).replace("Infinity", "inf"))


class CompletionSettings(BaseModel):
    """Request body for the ``/completions`` endpoint.

    Numeric fields are always floats, ``max_tokens`` included. Defaults only
    apply when the node leaves a field unset.
    """

    model: Optional[str] = None
    temperature: float = 0
    max_tokens: float = 100
    top_p: float = 1.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    stop: Optional[Any] = None
    prompt: Optional[Any] = None

    @classmethod
    def from_node_data(cls, data: Optional[Dict[str, Any]], prompt: Any = None) -> "CompletionSettings":
        data = data or {}
        numeric = {}
        for key in ("temperature", "max_tokens", "top_p", "frequency_penalty", "presence_penalty"):
            if data.get(key) is not None:
                numeric[key] = parse_float(data[key])
        return cls(model=data.get("model"), stop=data.get("stop"), prompt=prompt, **numeric)

    def payload(self) -> Dict[str, Any]:
        """Body as a JSON number encoder without a float type writes it.

        Whole floats go out as integers (``256.0`` -> ``256``), NaN and
        infinities as ``null``.
        """
        return {k: _wire_number(v) for k, v in self.model_dump().items()}


def _wire_number(v: Any) -> Any:
    if not isinstance(v, float):
        return v
    if not math.isfinite(v):
        return None
    return int(v) if v.is_integer() else v


class CompletionResult(BaseModel):
    success: bool
    result: Optional[str] = None
    error: Optional[str] = None


class RequestRecord(BaseModel):
    """One audited provider call."""

    project_id: Optional[str] = None
    request_data: str
    response_data: str
    start_time: int
    status_code: int
    status: str
    model: Optional[str] = None
    parameters: str
    type: Literal["completion"] = "completion"
    provider: Literal["openai"] = "openai"
    total_tokens: int
    hidden: bool = False
    processed: bool = False
    spell: Optional[str] = None
    node_id: Optional[Union[int, str]] = None
