"""Web search tool backed by the DuckDuckGo Instant Answer API."""

import logging
from typing import Any

import httpx

from toolcaddy.dispatcher import WEB_SEARCH_TOOL
from toolcaddy.tools.registry import ParameterSpec, ResultEnvelope, Tool, resolve_params
from toolcaddy.tools.result import fail, now, ok

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://api.duckduckgo.com/"
DEFAULT_TIMEOUT = 15.0
MAX_LIMIT = 20

SEARCH_PARAMETERS = {
    "query": ParameterSpec(type="string", description="Search query", required=True, default=""),
    "limit": ParameterSpec(type="integer", description="Maximum number of results (default: 5)", default=5),
}


def parse_results(payload: dict[str, Any], limit: int) -> list[dict[str, str]]:
    """Flatten an Instant Answer payload into {title, snippet, url, source} records."""
    results: list[dict[str, str]] = []

    if payload.get("AbstractText") and payload.get("AbstractURL"):
        results.append({
            "title": payload.get("Heading") or payload["AbstractURL"],
            "snippet": payload["AbstractText"],
            "url": payload["AbstractURL"],
            "source": payload.get("AbstractSource") or "DuckDuckGo",
        })

    for item in (payload.get("Results") or []) + (payload.get("RelatedTopics") or []):
        if not isinstance(item, dict):
            continue
        # Category entries nest their topics one level down
        topics = (item.get("Topics") or []) if "Topics" in item else [item]
        for topic in topics:
            if not isinstance(topic, dict):
                continue
            text = topic.get("Text")
            url = topic.get("FirstURL")
            if not isinstance(text, str) or not text or not isinstance(url, str) or not url:
                continue
            title, _, snippet = text.partition(" - ")
            results.append({
                "title": title,
                "snippet": snippet or text,
                "url": url,
                "source": "DuckDuckGo",
            })

    return results[:limit]


def make_web_search_tool(
    search_url: str = DEFAULT_SEARCH_URL,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Tool:
    async def _web_search(params: dict[str, Any]) -> ResultEnvelope:
        args = resolve_params(SEARCH_PARAMETERS, params)
        query = args["query"].strip()
        limit = max(1, min(args["limit"] or 5, MAX_LIMIT))

        if not query:
            return fail("query parameter is required")

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                resp = await client.get(
                    search_url,
                    params={"q": query, "format": "json", "no_html": 1, "skip_disambig": 1},
                )
                resp.raise_for_status()
                payload = resp.json()
                if not isinstance(payload, dict):
                    raise ValueError("unexpected search response shape")
        except httpx.HTTPStatusError as e:
            return fail(f"Search API returned status {e.response.status_code}", query=query, tool_executed=True)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Web search for %r failed: %s", query, e)
            return fail(f"Failed to search the web: {e}", query=query, tool_executed=True)

        results = parse_results(payload, limit)
        return ok(
            query=query,
            results=results,
            total_count=len(results),
            tool_executed=True,
            execution_time=now(),
        )

    return Tool(
        name=WEB_SEARCH_TOOL,
        description="Searches the web and returns titles, snippets, and links. The AI can use this "
        "to look up current information it does not know.",
        parameters=SEARCH_PARAMETERS,
        execute=_web_search,
    )
