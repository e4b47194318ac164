"""Dispatcher: look up a tool, run it, normalize the outcome, publish state."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from toolcaddy.errors import ToolError
from toolcaddy.state import ExecutionSnapshot, ExecutionState, Listener, ObserverChannel
from toolcaddy.tools.registry import ParameterSpec, ResultEnvelope, Tool, ToolRegistry
from toolcaddy.tools.result import fail

logger = logging.getLogger(__name__)

SCREENSHOT_TOOL = "screenshot"
FETCH_MODELS_TOOL = "fetch_ai_models"
SWITCH_MODEL_TOOL = "switch_ai_model"
WEB_SEARCH_TOOL = "web_search"


@runtime_checkable
class ModelSwitcher(Protocol):
    """Applies a model switch once the switch tool has validated it."""

    def switch_model(self, model_name: str) -> None: ...


@dataclass(frozen=True)
class CallbackModelSwitcher:
    callback: Callable[[str], None]

    def switch_model(self, model_name: str) -> None:
        self.callback(model_name)


class Dispatcher:
    """Runs registered tools by name and tracks the most recent dispatch.

    Every outcome, including a tool that raises, comes back as a result
    envelope; ``execute_tool`` never raises to its caller.
    """

    def __init__(self, registry: ToolRegistry | None = None) -> None:
        self.registry = registry if registry is not None else ToolRegistry()
        self._state = ExecutionState()
        self._observers = ObserverChannel()
        self._model_switcher: ModelSwitcher | None = None

    def register(self, tool: Tool) -> None:
        self.registry.register(tool)

    def register_tool(
        self,
        name: str,
        description: str,
        parameters: Mapping[str, ParameterSpec],
        execute: Callable[[dict[str, Any]], Awaitable[ResultEnvelope]],
    ) -> Tool:
        tool = Tool(name=name, description=description, parameters=parameters, execute=execute)
        self.registry.register(tool)
        return tool

    async def execute_tool(self, name: str, params: Mapping[str, Any] | None = None) -> ResultEnvelope:
        tool = self.registry.get(name)
        if tool is None:
            logger.warning("Dispatch of unknown tool '%s'", name)
            return fail(f'Tool "{name}" not found', available_tools=self.registry.names())

        self._state.begin(name)
        self._observers.notify()
        logger.debug("Executing tool '%s' with %s", name, params)

        try:
            result = await self._run(tool, params)
        except BaseException:
            # Cancelled or interrupted: clear the in-flight flag, then let it propagate.
            self._state.abort()
            self._observers.notify()
            logger.warning("Dispatch of '%s' was interrupted", name)
            raise

        self._state.finish(result)
        self._observers.notify()
        logger.info("Tool '%s' finished (success=%s)", name, result.get("success"))
        return result

    async def _run(self, tool: Tool, params: Mapping[str, Any] | None) -> ResultEnvelope:
        """Await the tool body and turn any failure into a result envelope."""
        try:
            result = await tool.execute(dict(params or {}))
            if not isinstance(result, Mapping):
                raise TypeError(f"tool returned {type(result).__name__}, expected a result envelope")
            return dict(result)
        except ToolError as e:
            logger.warning("Tool '%s' failed: %s", tool.name, e)
            return {**e.details, **fail(str(e), tool=tool.name)}
        except Exception as e:
            logger.exception("Error executing %s", tool.name)
            return fail(str(e) or type(e).__name__, tool=tool.name)

    def get_available_tools(self) -> list[Tool]:
        return self.registry.list_tools()

    def get_tool(self, name: str) -> Tool | None:
        return self.registry.get(name)

    def has_tool(self, name: str) -> bool:
        return self.registry.has(name)

    def tool_schemas(self) -> list[dict[str, Any]]:
        return self.registry.to_openai_schema()

    @property
    def has_screenshot_capability(self) -> bool:
        return self.has_tool(SCREENSHOT_TOOL)

    @property
    def has_model_switching_capability(self) -> bool:
        return self.has_tool(FETCH_MODELS_TOOL) and self.has_tool(SWITCH_MODEL_TOOL)

    @property
    def has_web_search_capability(self) -> bool:
        return self.has_tool(WEB_SEARCH_TOOL)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._observers.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._observers.unsubscribe(listener)

    @property
    def is_executing(self) -> bool:
        return self._state.is_executing

    @property
    def last_tool_used(self) -> str:
        return self._state.last_tool_used

    @property
    def last_result(self) -> ResultEnvelope:
        return dict(self._state.snapshot().last_result)

    @property
    def state(self) -> ExecutionSnapshot:
        return self._state.snapshot()

    @property
    def model_switcher(self) -> ModelSwitcher | None:
        return self._model_switcher

    def set_model_switcher(self, switcher: ModelSwitcher | None) -> None:
        self._model_switcher = switcher

    def set_model_switch_callback(self, callback: Callable[[str], None] | None) -> None:
        """Install a plain function as the model switcher (None clears it)."""
        self._model_switcher = CallbackModelSwitcher(callback) if callback is not None else None
