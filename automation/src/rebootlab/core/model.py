from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rebootlab.evidence.transport_base import DeviceClient
    from rebootlab.testbed.schema import TestbedModel
    from rebootlab.traffic.base import TrafficGenerator
    from rebootlab.utils.time import Clock


class CheckStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    WARN = "WARN"
    SKIP = "SKIP"


class Severity(str, Enum):
    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"


class ComponentType(str, Enum):
    CONTROLLER_CARD = "CONTROLLER_CARD"
    LINECARD = "LINECARD"
    FABRIC = "FABRIC"


class RedundancyRole(str, Enum):
    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"
    UNKNOWN = "UNKNOWN"


class RebootMethod(str, Enum):
    COLD = "COLD"
    WARM = "WARM"
    POWERDOWN = "POWERDOWN"


class PollState(str, Enum):
    POLLING = "POLLING"
    COMPLETED = "COMPLETED"
    TIMED_OUT = "TIMED_OUT"
    UNSUPPORTED_FATAL = "UNSUPPORTED_FATAL"


@dataclass(slots=True)
class CheckResult:
    case: str
    name: str
    status: CheckStatus
    severity: Severity
    message: str
    evidence: dict[str, Any] = field(default_factory=dict)
    remediation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "case": self.case,
            "name": self.name,
            "status": self.status.value,
            "severity": self.severity.value,
            "message": self.message,
            "evidence": self.evidence,
            "remediation": self.remediation,
        }


@dataclass(slots=True, frozen=True)
class ComponentDescriptor:
    """Read-only snapshot of one platform component.

    ``None`` on an optional leaf means the device did not report it, which is
    not the same thing as ``False``.
    """

    name: str
    type: str | None = None
    removable: bool | None = None
    empty: bool | None = None
    redundant_role: RedundancyRole | None = None
    oper_status: str | None = None


@dataclass(slots=True, frozen=True)
class SubcomponentPath:
    name: str
    name_only: bool = False

    @property
    def elems(self) -> list[dict[str, Any]]:
        if self.name_only:
            return [{"name": self.name}]
        return [{"name": "components"}, {"name": "component", "key": {"name": self.name}}]

    def __str__(self) -> str:
        return self.name if self.name_only else f"/components/component[name={self.name}]"


@dataclass(slots=True, frozen=True)
class RebootTarget:
    subcomponents: tuple[SubcomponentPath, ...]
    method: RebootMethod = RebootMethod.COLD

    @classmethod
    def for_component(cls, component: ComponentDescriptor, name_only: bool = False) -> RebootTarget:
        return cls(subcomponents=(SubcomponentPath(component.name, name_only),))

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.subcomponents]


@dataclass(slots=True, frozen=True)
class RebootStatusSample:
    active: bool
    unsupported: bool = False
    reason: str = ""
    count: int | None = None


@dataclass(slots=True, frozen=True)
class PollResult:
    state: PollState
    queries: int
    elapsed: float
    last_sample: RebootStatusSample | None = None


@dataclass(slots=True, frozen=True)
class InterfaceStateSnapshot:
    up: frozenset[str] = frozenset()

    def missing_from(self, other: InterfaceStateSnapshot) -> list[str]:
        return sorted(self.up - other.up)

    def recovered_in(self, other: InterfaceStateSnapshot) -> bool:
        return self.up <= other.up


@dataclass(slots=True, frozen=True)
class InterfaceCounters:
    name: str
    in_pkts: int | None = None


@dataclass(slots=True, frozen=True)
class TrapStatRecord:
    dev: int
    trap_code: int
    name: str
    count: int
    rate: int


@dataclass(slots=True, frozen=True)
class CommandResult:
    output: str
    error: str = ""


@dataclass(slots=True)
class RebootContext:
    lab: str
    testbed: TestbedModel
    client: DeviceClient
    traffic: TrafficGenerator | None = None
    clock: Clock | None = None
