"""Lifecycle contracts for managed components that surround the role schema.

The role registry never depends on these; they describe the shape other services
implement when they wrap a bindable network service.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable


class LifecycleStatus(StrEnum):
    STOPPED = "stopped"
    STARTING = "starting"
    STARTED = "started"
    STOPPING = "stopping"
    ERROR = "error"


@runtime_checkable
class LifecycleComponent(Protocol):
    """Component with explicit start/stop hooks and a status query."""

    @property
    def status(self) -> LifecycleStatus: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...


@runtime_checkable
class ManagedServer(LifecycleComponent, Protocol):
    """Lifecycle wrapper around a bindable service implementation."""

    @property
    def service_implementation(self) -> object: ...


__all__ = ["LifecycleComponent", "LifecycleStatus", "ManagedServer"]
