from __future__ import annotations

from dataclasses import replace

import pytest

from rebootlab.core.errors import RemoteError
from rebootlab.core.model import CommandResult, ComponentDescriptor, InterfaceCounters, RebootStatusSample
from rebootlab.testbed.loader import parse_testbed


class FakeClock:
    def __init__(self) -> None:
        self.t = 0.0
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.t

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.t += seconds


class FakeDevice:
    """In-memory DUT. Scripted answers are consumed in order; the last one sticks."""

    def __init__(self, components: list[ComponentDescriptor] | None = None, clock: FakeClock | None = None) -> None:
        self.clock = clock or FakeClock()
        self.components = {c.name: c for c in components or []}
        self.component_script: dict[str, list] = {}
        self.status_script: list = []
        self.status_queries: list = []
        self.reboots: list = []
        self.reboot_error: Exception | None = None
        self.interfaces: list[str] = []
        # (from time, interfaces up from then on)
        self.oper_timeline: list[tuple[float, set[str]]] = [(0.0, set())]
        self.counters: list[int | None] = []
        self.command_script: list = []
        self.commands: list[str] = []

    @staticmethod
    def _next(script: list):
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return item

    def list_components(self) -> list[ComponentDescriptor]:
        return list(self.components.values())

    def read_component(self, name: str) -> ComponentDescriptor:
        if name in self.component_script:
            return self._next(self.component_script[name])
        return self.components[name]

    def issue_reboot(self, target) -> None:
        if self.reboot_error is not None:
            raise self.reboot_error
        self.reboots.append(target)

    def reboot_status(self, subcomponents) -> RebootStatusSample:
        self.status_queries.append(subcomponents)
        return self._next(self.status_script)

    def list_interfaces(self) -> list[str]:
        return list(self.interfaces)

    def interface_oper_status(self, name: str) -> str | None:
        up = [ifaces for start, ifaces in self.oper_timeline if start <= self.clock.now()][-1]
        return "UP" if name in up else "DOWN"

    def interface_counters(self, name: str) -> InterfaceCounters:
        return InterfaceCounters(name=name, in_pkts=self._next(self.counters))

    def run_command(self, command: str) -> CommandResult:
        self.commands.append(command)
        return self._next(self.command_script)


class FakeTraffic:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def start_protocols(self) -> None:
        self.calls.append("start_protocols")

    def stop_protocols(self) -> None:
        self.calls.append("stop_protocols")

    def start_traffic(self) -> None:
        self.calls.append("start_traffic")

    def stop_traffic(self) -> None:
        self.calls.append("stop_traffic")


def active(value: bool) -> RebootStatusSample:
    return RebootStatusSample(active=value)


def transient() -> RemoteError:
    return RemoteError("connection refused", code="Unavailable")


def card(name: str, kind: str, **attrs) -> ComponentDescriptor:
    return replace(ComponentDescriptor(name=name, type=kind), **attrs)


TESTBED_DATA = {
    "dut": {
        "vendor": "juniper",
        "model": "PTX10008",
        "address": "192.0.2.10",
        "ports": {"port1": "et-1/0/0", "port2": "et-2/0/0"},
    },
    "timeouts": {"controller_start_delay": 60, "linecard_start_delay": 10},
    "traffic": {"iterations": 3, "interval": 30},
}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def testbed():
    return parse_testbed("unit", TESTBED_DATA)
