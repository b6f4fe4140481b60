from __future__ import annotations

import logging
from typing import Any

from rebootlab.core.errors import RemoteError
from rebootlab.core.model import (
    CommandResult,
    ComponentDescriptor,
    InterfaceCounters,
    RebootStatusSample,
    RebootTarget,
    RedundancyRole,
    SubcomponentPath,
)
from rebootlab.evidence.cli import CliTransport
from rebootlab.evidence.gnmi import GnmiTransport, GnmiUpdate, normalize_container, strip_module
from rebootlab.evidence.gnoi import GnoiTransport

logger = logging.getLogger(__name__)

COMPONENTS_PATH = "/components/component/state"
COMPONENT_PATH = "/components/component[name={name}]/state"
OPER_STATUS_PATH = "/interfaces/interface/state/oper-status"
IFACE_OPER_STATUS_PATH = "/interfaces/interface[name={name}]/state/oper-status"
IN_PKTS_PATH = "/interfaces/interface[name={name}]/state/counters/in-pkts"


def _opt_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _opt_role(value: Any) -> RedundancyRole | None:
    if value is None:
        return None
    try:
        return RedundancyRole(str(strip_module(value)).upper())
    except ValueError:
        return RedundancyRole.UNKNOWN


def descriptor_from_state(name: str, state: dict[str, Any]) -> ComponentDescriptor:
    raw_type = state.get("type")
    oper = state.get("oper-status")
    return ComponentDescriptor(
        name=name,
        type=str(strip_module(raw_type)) if raw_type is not None else None,
        removable=_opt_bool(state.get("removable")),
        empty=_opt_bool(state.get("empty")),
        redundant_role=_opt_role(state.get("redundant-role")),
        oper_status=str(strip_module(oper)) if oper is not None else None,
    )


def group_by_name(updates: list[GnmiUpdate]) -> dict[str, dict[str, Any]]:
    """Merge container and leaf updates into one state dict per keyed element."""
    grouped: dict[str, dict[str, Any]] = {}
    for upd in updates:
        if isinstance(upd.value, dict):
            state = normalize_container(upd.value)
            name = upd.key_name or state.get("name")
            if name is None:
                continue
            grouped.setdefault(str(name), {}).update(state)
        elif upd.key_name is not None:
            grouped.setdefault(upd.key_name, {})[upd.leaf] = upd.value
    return grouped


def _leaf_value(updates: list[GnmiUpdate], leaf: str) -> Any:
    for upd in updates:
        if isinstance(upd.value, dict):
            state = normalize_container(upd.value)
            if leaf in state:
                return state[leaf]
        elif upd.leaf == leaf:
            return upd.value
    return None


class EvidenceClient:
    """``DeviceClient`` backed by gnmic, grpcurl and ssh."""

    def __init__(self, gnmi: GnmiTransport, gnoi: GnoiTransport, cli: CliTransport) -> None:
        self.gnmi = gnmi
        self.gnoi = gnoi
        self.cli = cli

    def _updates(self, path: str) -> list[GnmiUpdate]:
        updates, error = self.gnmi.get_updates(path)
        if error is not None:
            raise RemoteError(f"gNMI get {path} failed: {error}")
        return updates

    def list_components(self) -> list[ComponentDescriptor]:
        grouped = group_by_name(self._updates(COMPONENTS_PATH))
        return [descriptor_from_state(name, state) for name, state in grouped.items()]

    def read_component(self, name: str) -> ComponentDescriptor:
        grouped = group_by_name(self._updates(COMPONENT_PATH.format(name=name)))
        return descriptor_from_state(name, grouped.get(name, {}))

    def issue_reboot(self, target: RebootTarget) -> None:
        response = self.gnoi.reboot(target)
        logger.info("Reboot response for %s: %s", target.names, response)

    def reboot_status(self, subcomponents: tuple[SubcomponentPath, ...] | None) -> RebootStatusSample:
        return self.gnoi.reboot_status(subcomponents)

    def list_interfaces(self) -> list[str]:
        return sorted(group_by_name(self._updates(OPER_STATUS_PATH)))

    def interface_oper_status(self, name: str) -> str | None:
        value = _leaf_value(self._updates(IFACE_OPER_STATUS_PATH.format(name=name)), "oper-status")
        return str(strip_module(value)) if value is not None else None

    def interface_counters(self, name: str) -> InterfaceCounters:
        value = _leaf_value(self._updates(IN_PKTS_PATH.format(name=name)), "in-pkts")
        # uint64 leaves come back as strings under json_ietf
        return InterfaceCounters(name=name, in_pkts=int(value) if value is not None else None)

    def run_command(self, command: str) -> CommandResult:
        r = self.cli.run(command)
        if r.rc != 0:
            return CommandResult(output=r.stdout, error=r.stderr or f"exit status {r.rc}")
        return CommandResult(output=r.stdout)
