"""Model tools: list the catalog, and switch to a model after checking it exists."""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from toolcaddy.client import ModelCatalog
from toolcaddy.dispatcher import FETCH_MODELS_TOOL, SWITCH_MODEL_TOOL, ModelSwitcher
from toolcaddy.tools.registry import ParameterSpec, ResultEnvelope, Tool, resolve_params
from toolcaddy.tools.result import fail, is_success, now, ok

logger = logging.getLogger(__name__)

FETCH_MODELS_PARAMETERS = {
    "refresh": ParameterSpec(
        type="boolean",
        description="Force refresh the models list (default: false)",
        default=False,
    ),
    "filter": ParameterSpec(
        type="string",
        description="Filter models by name pattern (optional)",
        default="",
    ),
}

SWITCH_MODEL_PARAMETERS = {
    "model_name": ParameterSpec(
        type="string",
        description="Name of the model to switch to",
        required=True,
        default="",
    ),
    "reason": ParameterSpec(
        type="string",
        description="Reason for switching models (optional)",
        default="User request",
    ),
}


def make_fetch_models_tool(catalog: ModelCatalog) -> Tool:
    async def _fetch_ai_models(params: dict[str, Any]) -> ResultEnvelope:
        args = resolve_params(FETCH_MODELS_PARAMETERS, params)
        refresh = args["refresh"]
        pattern = args["filter"]

        try:
            models = await catalog.list_models(refresh=refresh)
        except httpx.HTTPStatusError as e:
            return fail(
                f"API returned status {e.response.status_code}: {e.response.reason_phrase}",
                tool_executed=True,
                api_status="Failed to connect",
            )
        except Exception as e:
            logger.warning("Model catalog request failed: %s", e)
            return fail(
                f"Failed to fetch AI models: {e}",
                tool_executed=True,
                api_status="Connection error",
            )

        if pattern:
            needle = pattern.lower()
            models = [m for m in models if needle in m.lower()]

        return ok(
            models=models,
            total_count=len(models),
            filter_applied=pattern,
            refreshed=refresh,
            tool_executed=True,
            execution_time=now(),
            api_status="Connected successfully",
        )

    return Tool(
        name=FETCH_MODELS_TOOL,
        description="Fetches available AI models from the API. The AI can use this to switch models "
        "if one is not responding or if the user is not satisfied with the current model.",
        parameters=FETCH_MODELS_PARAMETERS,
        execute=_fetch_ai_models,
    )


def make_switch_model_tool(
    fetch_tool: Tool,
    switcher: Callable[[], ModelSwitcher | None],
) -> Tool:
    """Build the switch tool on top of fetch_tool.

    fetch_tool is awaited directly rather than dispatched, so the shared
    execution state only ever shows the switch itself. switcher is read at
    call time so a switcher installed after registration is honored.
    """

    async def _switch_ai_model(params: dict[str, Any]) -> ResultEnvelope:
        args = resolve_params(SWITCH_MODEL_PARAMETERS, params)
        model_name = args["model_name"]
        reason = args["reason"]

        if not model_name.strip():
            return fail("model_name parameter is required", tool_executed=False)

        try:
            listing = await fetch_tool.execute({"refresh": True})
            if not is_success(listing):
                return fail(
                    "Could not fetch models list to verify model exists",
                    reason=listing.get("error"),
                    tool_executed=True,
                )

            models = list(listing.get("models") or [])
            if model_name not in models:
                return fail(
                    f'Model "{model_name}" not found in available models',
                    available_models=models,
                    suggestion="Try one of the available models listed above",
                    tool_executed=True,
                )

            active = switcher()
            if active is not None:
                active.switch_model(model_name)
                logger.info("Switched model to %s", model_name)

            return ok(
                new_model=model_name,
                reason=reason,
                available_models=models,
                tool_executed=True,
                execution_time=now(),
                action_completed="Model switched successfully"
                if active is not None
                else f"UI should update the selected model to {model_name}",
                validation="Model exists and is available",
            )
        except Exception as e:
            logger.exception("Model switch to %s failed", model_name)
            return fail(f"Failed to switch AI model: {e}", tool_executed=True)

    return Tool(
        name=SWITCH_MODEL_TOOL,
        description="Switches to a different AI model. The AI can use this when a model is not "
        "responding well or when the user requests a different model.",
        parameters=SWITCH_MODEL_PARAMETERS,
        execute=_switch_ai_model,
    )
