"""Execution state of the most recent dispatch and the observers watching it."""

import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from toolcaddy.tools.registry import ResultEnvelope

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


def copy_envelope(result: ResultEnvelope) -> ResultEnvelope:
    """Deep copy when possible; payloads holding locks, clients or generators get a shallow copy."""
    try:
        return copy.deepcopy(result)
    except Exception as e:
        logger.debug("Result envelope not deep-copyable (%s), storing a shallow copy", e)
        return dict(result)


@dataclass
class ExecutionState:
    """Mutable record owned by a single Dispatcher."""

    is_executing: bool = False
    last_tool_used: str = ""
    last_result: ResultEnvelope = field(default_factory=dict)

    def begin(self, tool_name: str) -> None:
        self.is_executing = True
        self.last_tool_used = tool_name

    def finish(self, result: ResultEnvelope) -> None:
        self.is_executing = False
        self.last_result = copy_envelope(result)

    def abort(self) -> None:
        """End an interrupted dispatch; last_result keeps the last completed one."""
        self.is_executing = False

    def snapshot(self) -> "ExecutionSnapshot":
        return ExecutionSnapshot(
            is_executing=self.is_executing,
            last_tool_used=self.last_tool_used,
            last_result=MappingProxyType(copy_envelope(self.last_result)),
        )


@dataclass(frozen=True)
class ExecutionSnapshot:
    """Read-only view of ExecutionState handed to consumers."""

    is_executing: bool
    last_tool_used: str
    last_result: Mapping[str, Any]


class ObserverChannel:
    """Synchronous publish/subscribe for "state changed" signals."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener; returns a callable that removes it again."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("State listener %r failed", listener)

    def __len__(self) -> int:
        return len(self._listeners)
