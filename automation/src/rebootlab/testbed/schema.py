from __future__ import annotations

from dataclasses import dataclass, field

TRAPSTATS_COMMAND = 'request pfe execute target {linecard} command "show cda trapstats" | no-more'


@dataclass(slots=True)
class Endpoint:
    address: str
    port: int
    username: str = "admin"
    password: str = "admin"
    skip_verify: bool = True

    @property
    def target(self) -> str:
        return f"{self.address}:{self.port}"


@dataclass(slots=True)
class DutSpec:
    name: str
    vendor: str
    model: str
    ports: dict[str, str]
    gnmi: Endpoint
    gnoi: Endpoint
    ssh: Endpoint


@dataclass(slots=True)
class ExpectedCounts:
    controller_cards: int = -1
    linecards: int = -1
    fabrics: int = -1


@dataclass(slots=True)
class Timeouts:
    poll_interval: float = 10.0
    controller_start_delay: float = 60.0
    controller_boot_time: float = 600.0
    linecard_start_delay: float = 10.0
    linecard_boot_time: float = 600.0
    fabric_boot_time: float = 600.0
    linecard_interfaces_recovery: float = 600.0
    fabric_interfaces_recovery: float = 300.0


@dataclass(slots=True)
class Deviations:
    gnoi_subcomponent_path: bool = False
    gnoi_subcomponent_reboot_status_unsupported: bool = False
    gnoi_fabric_component_reboot_unsupported: bool = False


@dataclass(slots=True)
class TrafficSpec:
    otg_url: str | None = None
    flow_name: str = "flow-ipv4"
    iterations: int = 10
    interval: float = 30.0
    trapstats_command: str = TRAPSTATS_COMMAND
    ingress_port: str = "port1"
    verify_tls: bool = False


@dataclass(slots=True)
class TestbedModel:
    __test__ = False

    lab_name: str
    dut: DutSpec
    expected: ExpectedCounts = field(default_factory=ExpectedCounts)
    timeouts: Timeouts = field(default_factory=Timeouts)
    deviations: Deviations = field(default_factory=Deviations)
    traffic: TrafficSpec = field(default_factory=TrafficSpec)
    check_interfaces_in_binding: bool = False

    def port_name(self, port_id: str) -> str:
        return self.dut.ports[port_id]
