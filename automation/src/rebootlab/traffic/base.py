from __future__ import annotations

from typing import Protocol


class TrafficGenerator(Protocol):
    """Start/stop control over a traffic generator whose config is already pushed."""

    def start_protocols(self) -> None:
        ...

    def stop_protocols(self) -> None:
        ...

    def start_traffic(self) -> None:
        ...

    def stop_traffic(self) -> None:
        ...
