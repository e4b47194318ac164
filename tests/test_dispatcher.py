import asyncio
import threading

import pytest

from toolcaddy.dispatcher import Dispatcher
from toolcaddy.errors import ToolError
from toolcaddy.tools.registry import ParameterSpec


def _recorder(dispatcher: Dispatcher) -> list[tuple[bool, str]]:
    seen: list[tuple[bool, str]] = []
    dispatcher.subscribe(lambda: seen.append((dispatcher.is_executing, dispatcher.last_tool_used)))
    return seen


def _dispatcher_with_echo() -> Dispatcher:
    dispatcher = Dispatcher()

    async def echo(params):
        return {"success": True, "echo": params.get("text", "")}

    dispatcher.register_tool(
        "echo",
        "Echo text back",
        {"text": ParameterSpec(type="string", description="Text to echo")},
        echo,
    )
    return dispatcher


def test_unknown_tool_lists_available_and_leaves_state_alone() -> None:
    dispatcher = _dispatcher_with_echo()
    seen = _recorder(dispatcher)

    result = asyncio.run(dispatcher.execute_tool("nope", {}))

    assert result == {
        "success": False,
        "error": 'Tool "nope" not found',
        "available_tools": ["echo"],
    }
    assert seen == []
    assert dispatcher.last_tool_used == ""
    assert dispatcher.last_result == {}
    assert dispatcher.is_executing is False


def test_successful_dispatch_notifies_twice_around_execution() -> None:
    dispatcher = _dispatcher_with_echo()
    seen = _recorder(dispatcher)

    result = asyncio.run(dispatcher.execute_tool("echo", {"text": "hi"}))

    assert result == {"success": True, "echo": "hi"}
    assert seen == [(True, "echo"), (False, "echo")]
    assert dispatcher.last_result == result


def test_tool_sees_executing_flag_while_running() -> None:
    dispatcher = Dispatcher()
    observed = {}

    async def peek(params):
        observed["executing"] = dispatcher.is_executing
        observed["last_result"] = dispatcher.last_result
        return {"success": True}

    dispatcher.register_tool("peek", "reads state mid-dispatch", {}, peek)
    asyncio.run(dispatcher.execute_tool("peek"))

    assert observed == {"executing": True, "last_result": {}}
    assert dispatcher.is_executing is False


def test_raising_tool_becomes_failure_envelope() -> None:
    dispatcher = Dispatcher()
    seen = _recorder(dispatcher)

    async def boom(params):
        await asyncio.sleep(0)
        raise RuntimeError("backend unreachable")

    dispatcher.register_tool("boom", "always fails", {}, boom)

    result = asyncio.run(dispatcher.execute_tool("boom", {}))

    assert result == {"success": False, "error": "backend unreachable", "tool": "boom"}
    assert dispatcher.is_executing is False
    assert dispatcher.last_result == result
    assert len(seen) == 2


def test_tool_error_details_are_merged() -> None:
    dispatcher = Dispatcher()

    async def picky(params):
        raise ToolError("bad input", details={"field": "url", "tool": "ignored"})

    dispatcher.register_tool("picky", "raises ToolError", {}, picky)

    result = asyncio.run(dispatcher.execute_tool("picky", {}))

    assert result == {"success": False, "error": "bad input", "tool": "picky", "field": "url"}


def test_non_mapping_result_is_a_failure() -> None:
    dispatcher = Dispatcher()

    async def stringy(params):
        return "done"

    dispatcher.register_tool("stringy", "returns a string", {}, stringy)

    result = asyncio.run(dispatcher.execute_tool("stringy", {}))

    assert result["success"] is False
    assert result["tool"] == "stringy"
    assert "expected a result envelope" in result["error"]


def test_last_result_is_a_defensive_copy() -> None:
    dispatcher = Dispatcher()

    async def listy(params):
        return {"success": True, "items": [1, 2]}

    dispatcher.register_tool("listy", "returns a list", {}, listy)
    returned = asyncio.run(dispatcher.execute_tool("listy"))

    returned["items"].append(3)
    view = dispatcher.last_result
    view["items"].append(4)
    view["success"] = False

    assert dispatcher.last_result == {"success": True, "items": [1, 2]}
    assert dispatcher.state.last_result["items"] == [1, 2]


def test_failing_listener_does_not_break_dispatch() -> None:
    dispatcher = _dispatcher_with_echo()
    calls = []

    def bad_listener():
        raise ValueError("listener bug")

    dispatcher.subscribe(bad_listener)
    dispatcher.subscribe(lambda: calls.append(dispatcher.is_executing))

    result = asyncio.run(dispatcher.execute_tool("echo", {"text": "x"}))

    assert result["success"] is True
    assert calls == [True, False]


def test_unsubscribe_stops_notifications() -> None:
    dispatcher = _dispatcher_with_echo()
    calls = []
    unsubscribe = dispatcher.subscribe(lambda: calls.append(1))

    asyncio.run(dispatcher.execute_tool("echo"))
    unsubscribe()
    asyncio.run(dispatcher.execute_tool("echo"))

    assert calls == [1, 1]


def test_concurrent_dispatches_share_one_state_slot() -> None:
    dispatcher = Dispatcher()

    async def slow(params):
        await asyncio.sleep(0.05)
        return {"success": True, "who": "slow"}

    async def fast(params):
        return {"success": True, "who": "fast"}

    dispatcher.register_tool("slow", "slow", {}, slow)
    dispatcher.register_tool("fast", "fast", {}, fast)

    async def both():
        return await asyncio.gather(
            dispatcher.execute_tool("slow"),
            dispatcher.execute_tool("fast"),
        )

    slow_result, fast_result = asyncio.run(both())

    assert slow_result["who"] == "slow"
    assert fast_result["who"] == "fast"
    assert dispatcher.last_result["who"] == "slow"
    assert dispatcher.is_executing is False


def test_introspection_and_capability_flags() -> None:
    dispatcher = Dispatcher()

    async def noop(params):
        return {"success": True}

    for name in ("screenshot", "fetch_ai_models"):
        dispatcher.register_tool(name, name, {}, noop)

    assert [t.name for t in dispatcher.get_available_tools()] == ["screenshot", "fetch_ai_models"]
    assert dispatcher.get_tool("screenshot").name == "screenshot"
    assert dispatcher.get_tool("web_search") is None
    assert dispatcher.has_screenshot_capability is True
    assert dispatcher.has_model_switching_capability is False
    assert dispatcher.has_web_search_capability is False

    dispatcher.register_tool("switch_ai_model", "switch", {}, noop)
    assert dispatcher.has_model_switching_capability is True


def test_switch_callback_can_be_replaced_and_cleared() -> None:
    dispatcher = Dispatcher()
    first, second = [], []

    dispatcher.set_model_switch_callback(first.append)
    dispatcher.set_model_switch_callback(second.append)
    dispatcher.model_switcher.switch_model("m1")

    assert first == []
    assert second == ["m1"]

    dispatcher.set_model_switch_callback(None)
    assert dispatcher.model_switcher is None


def test_uncopyable_payload_still_completes_dispatch() -> None:
    dispatcher = Dispatcher()
    seen = _recorder(dispatcher)
    lock = threading.Lock()

    async def handle(params):
        return {"success": True, "lock": lock}

    dispatcher.register_tool("handle", "returns a live lock", {}, handle)

    result = asyncio.run(dispatcher.execute_tool("handle"))

    assert result == {"success": True, "lock": lock}
    assert seen == [(True, "handle"), (False, "handle")]
    assert dispatcher.last_result["lock"] is lock
    assert dispatcher.state.last_result["success"] is True


def test_cancelled_dispatch_clears_executing_flag() -> None:
    dispatcher = Dispatcher()
    seen = _recorder(dispatcher)

    async def slow(params):
        await asyncio.sleep(5)
        return {"success": True}

    dispatcher.register_tool("slow", "takes a while", {}, slow)

    async def go():
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(dispatcher.execute_tool("slow"), 0.01)

    asyncio.run(go())

    assert dispatcher.is_executing is False
    assert seen == [(True, "slow"), (False, "slow")]
    assert dispatcher.last_result == {}
