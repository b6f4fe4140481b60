from __future__ import annotations

from typing import Protocol

from rebootlab.core.model import (
    CommandResult,
    ComponentDescriptor,
    InterfaceCounters,
    RebootStatusSample,
    RebootTarget,
    SubcomponentPath,
)


class DeviceClient(Protocol):
    """Everything the reboot cases need from the DUT.

    Reads return explicit ``None`` for leaves the device does not report.
    RPC failures surface as ``RemoteError`` subclasses.
    """

    def list_components(self) -> list[ComponentDescriptor]:
        ...

    def read_component(self, name: str) -> ComponentDescriptor:
        ...

    def issue_reboot(self, target: RebootTarget) -> None:
        """Raises ``RebootRejectedError`` when the device refuses."""
        ...

    def reboot_status(self, subcomponents: tuple[SubcomponentPath, ...] | None) -> RebootStatusSample:
        """``None`` queries the whole device (degraded mode)."""
        ...

    def list_interfaces(self) -> list[str]:
        ...

    def interface_oper_status(self, name: str) -> str | None:
        ...

    def interface_counters(self, name: str) -> InterfaceCounters:
        ...

    def run_command(self, command: str) -> CommandResult:
        ...
