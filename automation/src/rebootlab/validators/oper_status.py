from __future__ import annotations

import logging
from typing import Callable

from rebootlab.core.model import ComponentDescriptor, InterfaceStateSnapshot
from rebootlab.evidence.transport_base import DeviceClient
from rebootlab.utils.time import Clock, await_value

logger = logging.getLogger(__name__)

OPER_UP = "UP"
RECHECK_INTERVAL = 10.0


def fetch_oper_up_interfaces(client: DeviceClient, only: list[str] | None = None) -> InterfaceStateSnapshot:
    """Snapshot the interfaces that are operationally up right now.

    ``only`` limits the snapshot to the named interfaces (the testbed binding).
    """
    names = list(only) if only is not None else client.list_interfaces()
    up = frozenset(n for n in names if (client.interface_oper_status(n) or "").upper() == OPER_UP)
    return InterfaceStateSnapshot(up=up)


def await_interfaces_recovered(
    client: DeviceClient,
    before: InterfaceStateSnapshot,
    timeout: float,
    clock: Clock,
    interval: float = RECHECK_INTERVAL,
) -> InterfaceStateSnapshot:
    """Wait until every interface in ``before`` is up again.

    Interfaces that come up without having been up before are fine. Raises
    ``WaitTimeoutError`` whose ``last_value`` lists what never recovered.
    """
    names = sorted(before.up)

    def probe() -> InterfaceStateSnapshot:
        return fetch_oper_up_interfaces(client, only=names)

    after = await_value(
        clock,
        timeout,
        probe,
        before.recovered_in,
        interval=interval,
        what=f"{len(names)} oper-up interfaces",
    )
    logger.info("All %d interfaces that were up before the reboot are up again", len(names))
    return after


def missing_interfaces(before: InterfaceStateSnapshot, last: object) -> list[str]:
    if isinstance(last, InterfaceStateSnapshot):
        return before.missing_from(last)
    return sorted(before.up)


def await_component_state(
    client: DeviceClient,
    name: str,
    predicate: Callable[[ComponentDescriptor], bool],
    timeout: float,
    clock: Clock,
    what: str,
    interval: float = RECHECK_INTERVAL,
) -> ComponentDescriptor:
    return await_value(
        clock,
        timeout,
        lambda: client.read_component(name),
        predicate,
        interval=interval,
        what=f"{name} {what}",
    )
