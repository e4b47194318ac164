"""Screenshot tool: build a WordPress mshots preview URL for a webpage."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from toolcaddy.dispatcher import SCREENSHOT_TOOL
from toolcaddy.tools.registry import ParameterSpec, ResultEnvelope, Tool, resolve_params
from toolcaddy.tools.result import fail, now, ok

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "https://s0.wp.com/mshots/v1"
DEFAULT_TIMEOUT = 15.0
SERVICE_LABEL = "WordPress mshots API (direct preview)"

SCREENSHOT_PARAMETERS = {
    "url": ParameterSpec(type="string", description="The URL to take screenshot of", required=True, default=""),
    "width": ParameterSpec(type="integer", description="Screenshot width in pixels (default: 1200)", default=1200),
    "height": ParameterSpec(type="integer", description="Screenshot height in pixels (default: 800)", default=800),
}


def normalize_url(url: str) -> str:
    """Add https:// when the URL has no scheme and validate it has a host."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    parsed = httpx.URL(url)
    if not parsed.host:
        raise ValueError(f"missing host in {url!r}")
    return url


def preview_url(service: str, target: str, width: int, height: int) -> str:
    return f"{service.rstrip('/')}/{quote(target, safe='')}?w={width}&h={height}"


def make_screenshot_tool(
    service: str = DEFAULT_SERVICE,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Tool:
    async def _take_screenshot(params: dict[str, Any]) -> ResultEnvelope:
        args = resolve_params(SCREENSHOT_PARAMETERS, params)
        url = args["url"]
        width = args["width"]
        height = args["height"]

        if not url.strip():
            return fail("URL parameter is required")

        try:
            target = normalize_url(url)
        except (httpx.InvalidURL, ValueError):
            return fail(f"Invalid URL format: {url}")

        screenshot_url = preview_url(service, target, width, height)
        envelope = {
            "url": target,
            "screenshot_url": screenshot_url,
            "preview_url": screenshot_url,
            "width": width,
            "height": height,
            "service": SERVICE_LABEL,
            "tool_executed": True,
        }

        # The HEAD probe only reports reachability; the preview URL is usable either way.
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                resp = await client.head(screenshot_url)
        except httpx.HTTPError as e:
            logger.info("Screenshot service probe failed for %s: %s", target, e)
            return ok(
                **envelope,
                description=f"Screenshot service initiated for {target}",
                note="Service response pending - image may take a moment to generate",
                execution_time=now(),
            )

        return ok(
            **envelope,
            description=f"Screenshot captured successfully for {target}",
            accessible=resp.status_code == 200,
            execution_time=now(),
        )

    return Tool(
        name=SCREENSHOT_TOOL,
        description="Takes a screenshot of any webpage using WordPress preview service. The AI can use "
        "this tool to visually understand websites, capture content, or help users with visual tasks.",
        parameters=SCREENSHOT_PARAMETERS,
        execute=_take_screenshot,
    )
