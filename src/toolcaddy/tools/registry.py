"""Tool descriptors, parameter schemas, and the registry that holds them."""

from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

ResultEnvelope = dict[str, Any]

PARAM_TYPES = ("string", "integer", "boolean")

_TRUTHY = {"true", "1", "yes", "y", "on"}
_FALSY = {"false", "0", "no", "n", "off", ""}


@dataclass(frozen=True)
class ParameterSpec:
    """Declared shape of a single tool parameter. Not enforced by the dispatcher."""

    type: str
    description: str
    required: bool = False
    default: Any = None

    def __post_init__(self) -> None:
        if self.type not in PARAM_TYPES:
            raise ValueError(f"unsupported parameter type '{self.type}', expected one of {PARAM_TYPES}")

    def coerce(self, value: Any) -> Any:
        """Best-effort conversion of value to this parameter's type, falling back to the default."""
        if value is None:
            return self.default
        try:
            if self.type == "integer":
                if isinstance(value, bool):
                    return self.default
                return int(value)
            if self.type == "boolean":
                if isinstance(value, bool):
                    return value
                text = str(value).strip().lower()
                if text in _TRUTHY:
                    return True
                if text in _FALSY:
                    return False
                return self.default
            return str(value)
        except (TypeError, ValueError):
            return self.default

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    parameters: Mapping[str, ParameterSpec] = field(hash=False)
    execute: Callable[[dict[str, Any]], Awaitable[ResultEnvelope]] = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def required_parameters(self) -> list[str]:
        return [name for name, spec in self.parameters.items() if spec.required]


def resolve_params(parameters: Mapping[str, ParameterSpec], params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Apply defaults and coercion for every declared parameter.

    Undeclared keys are passed through untouched so tools can accept extras.
    """
    raw = dict(params or {})
    resolved = dict(raw)
    for name, spec in parameters.items():
        resolved[name] = spec.coerce(raw.get(name))
    return resolved


class ToolRegistry:
    """Holds registered tools in registration order."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def list_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self.list_tools())

    def __len__(self) -> int:
        return len(self._tools)

    def to_openai_schema(self) -> list[dict[str, Any]]:
        """Return tool definitions in OpenAI function-calling format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description,
                    "parameters": {
                        "type": "object",
                        "properties": {
                            name: spec.to_json_schema() for name, spec in t.parameters.items()
                        },
                        "required": t.required_parameters,
                    },
                },
            }
            for t in self._tools.values()
        ]
