"""Default wiring: a Dispatcher with the built-in tools registered."""

import httpx

from toolcaddy.client import ModelCatalog
from toolcaddy.config import Settings
from toolcaddy.dispatcher import Dispatcher
from toolcaddy.tools.models import make_fetch_models_tool, make_switch_model_tool
from toolcaddy.tools.screenshot import make_screenshot_tool
from toolcaddy.tools.search import make_web_search_tool


def build_dispatcher(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[Dispatcher, ModelCatalog]:
    """Register screenshot, fetch_ai_models, switch_ai_model and web_search.

    The caller owns the returned catalog and must close it.
    """
    settings = settings or Settings()
    catalog = ModelCatalog(
        settings.models_url,
        api_key=settings.api_key,
        timeout=settings.models_timeout,
        cache_ttl=settings.models_cache_ttl,
        transport=transport,
    )

    dispatcher = Dispatcher()
    fetch_tool = make_fetch_models_tool(catalog)
    dispatcher.register(
        make_screenshot_tool(settings.screenshot_service, timeout=settings.http_timeout, transport=transport)
    )
    dispatcher.register(fetch_tool)
    dispatcher.register(make_switch_model_tool(fetch_tool, lambda: dispatcher.model_switcher))
    dispatcher.register(
        make_web_search_tool(settings.search_url, timeout=settings.http_timeout, transport=transport)
    )
    return dispatcher, catalog
