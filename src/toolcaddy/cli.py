"""Entry point: click CLI, config resolution, tool dispatch from the terminal."""

import asyncio
import json
from pathlib import Path

import click

from toolcaddy.config import Settings, build_settings, load_config
from toolcaddy.logs import LOG_LEVELS, configure_logging
from toolcaddy.render import (
    console,
    render_capabilities,
    render_error,
    render_tool_call,
    render_tool_result,
    render_tools,
    status_printer,
)
from toolcaddy.service import build_dispatcher
from toolcaddy.tools.result import is_success

DEMO_CALLS = [
    ("screenshot", {"url": "https://www.google.com", "width": 800, "height": 600}),
    ("fetch_ai_models", {"refresh": True}),
    ("switch_ai_model", {"model_name": "claude-3-7-sonnet", "reason": "Testing external tools"}),
    ("web_search", {"query": "artificial intelligence news", "limit": 3}),
]


def parse_params(pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn ("key=value", ...) into a dict; values stay strings for the tool to coerce."""
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected key=value, got '{pair}'", param_hint="--param")
        params[key.strip()] = value
    return params


def _announce_switch(model_name: str) -> None:
    console.print(f"[bold green]Model switched to {model_name}[/bold green]")


async def _dispatch(settings: Settings, name: str, params: dict) -> dict:
    dispatcher, catalog = build_dispatcher(settings)
    dispatcher.set_model_switch_callback(_announce_switch)
    dispatcher.subscribe(status_printer(dispatcher))
    try:
        render_tool_call(name, params)
        result = await dispatcher.execute_tool(name, params)
        render_tool_result(result)
        return result
    finally:
        await catalog.close()


async def _run_demo(settings: Settings) -> None:
    dispatcher, catalog = build_dispatcher(settings)
    try:
        render_tools(dispatcher.get_available_tools())
        for name, params in DEMO_CALLS:
            render_tool_call(name, params)
            result = await dispatcher.execute_tool(name, params)
            render_tool_result(result)
        console.print("\n[bold]Tool capabilities:[/bold]")
        render_capabilities(dispatcher)
    finally:
        await catalog.close()


@click.group()
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="Path to config file (default: ~/.config/toolcaddy/config.toml).")
@click.option("--models-url", default=None, help="Model catalog endpoint (OpenAI-compatible /v1/models).")
@click.option("--api-key", default=None, envvar="TOOLCADDY_API_KEY", help="API key for the model catalog (or set TOOLCADDY_API_KEY).")
@click.option("--log-level", default=None, type=click.Choice(LOG_LEVELS, case_sensitive=False), help="Logging verbosity (default: WARNING).")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    models_url: str | None,
    api_key: str | None,
    log_level: str | None,
) -> None:
    """toolcaddy: dispatch named tools and inspect what they return."""
    cfg = load_config(config_path)
    try:
        settings = build_settings(cfg, models_url=models_url, api_key=api_key, log_level=log_level)
    except (TypeError, ValueError) as e:
        render_error(f"Invalid configuration: {e}")
        raise SystemExit(1)

    configure_logging(settings.log_level)
    ctx.obj = settings


@main.command("tools")
@click.option("--json", "as_json", is_flag=True, help="Print OpenAI function-calling schemas instead of a table.")
@click.pass_obj
def list_tools(settings: Settings, as_json: bool) -> None:
    """List available tools and their parameters."""
    dispatcher, catalog = build_dispatcher(settings)
    if as_json:
        click.echo(json.dumps(dispatcher.tool_schemas(), indent=2))
    else:
        render_tools(dispatcher.get_available_tools())
    asyncio.run(catalog.close())


@main.command("run")
@click.argument("name")
@click.option("-p", "--param", "pairs", multiple=True, help="Tool parameter as key=value (repeatable).")
@click.pass_obj
def run_tool(settings: Settings, name: str, pairs: tuple[str, ...]) -> None:
    """Run a single tool by NAME."""
    params = parse_params(pairs)
    result = asyncio.run(_dispatch(settings, name, params))
    if not is_success(result):
        raise SystemExit(1)


@main.command("demo")
@click.pass_obj
def demo(settings: Settings) -> None:
    """Exercise every built-in tool and print capability flags."""
    asyncio.run(_run_demo(settings))


if __name__ == "__main__":
    main()
