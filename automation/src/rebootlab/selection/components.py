"""Pick the component a reboot case operates on.

Selection never raises for environment conditions; it reports them on the
returned ``Selection`` so the case can record a topology mismatch first and
then decide between skipping and failing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from rebootlab.core.errors import TopologyMismatchError
from rebootlab.core.model import ComponentDescriptor, ComponentType, RedundancyRole

logger = logging.getLogger(__name__)

_JUNIPER_PORT_RE = re.compile(r"^[a-z]+-(\d+)/\d+/\d+(?::\d+)?$")

_KIND_LABELS = {
    ComponentType.CONTROLLER_CARD: "controller cards",
    ComponentType.LINECARD: "linecards",
    ComponentType.FABRIC: "fabrics",
}


@dataclass(slots=True)
class Selection:
    kind: ComponentType
    discovered: list[ComponentDescriptor]
    candidates: list[ComponentDescriptor] = field(default_factory=list)
    target: ComponentDescriptor | None = None
    active: ComponentDescriptor | None = None
    mismatch: TopologyMismatchError | None = None
    skip_reason: str | None = None
    error: str | None = None

    @property
    def label(self) -> str:
        return _KIND_LABELS[self.kind]


def find_components_by_type(inventory: list[ComponentDescriptor], kind: ComponentType) -> list[ComponentDescriptor]:
    return [c for c in inventory if c.type == kind.value]


def count_mismatch(kind: ComponentType, got: int, expected: int) -> TopologyMismatchError | None:
    if expected >= 0 and got != expected:
        return TopologyMismatchError(_KIND_LABELS[kind], got, expected)
    return None


def linecard_candidates(cards: list[ComponentDescriptor], expected: int) -> list[ComponentDescriptor]:
    """Drop empty slots, but only when the inventory is larger than declared.

    Platforms that cannot report ``empty`` keep every card.
    """
    if len(cards) <= expected:
        return list(cards)
    return [c for c in cards if c.empty is not True]


def removable_components(candidates: list[ComponentDescriptor]) -> list[ComponentDescriptor]:
    out: list[ComponentDescriptor] = []
    for c in candidates:
        if c.removable is None:
            logger.info("Detected non-removable component (removable not reported): %s", c.name)
            continue
        if c.removable:
            logger.info("Found removable component: %s", c.name)
            out.append(c)
        else:
            logger.info("Found non-removable component: %s", c.name)
    return out


def _no_removable(selection: Selection, expected: int) -> Selection:
    if expected > 0:
        selection.error = f"No removable {selection.label[:-1]} found for the testing on a modular device"
    else:
        selection.skip_reason = f"No removable {selection.label[:-1]} found for the testing"
    return selection


def find_standby_controller(cards: list[ComponentDescriptor]) -> tuple[ComponentDescriptor | None, ComponentDescriptor | None, str | None]:
    standby = [c for c in cards if c.redundant_role == RedundancyRole.SECONDARY]
    active = [c for c in cards if c.redundant_role == RedundancyRole.PRIMARY]
    if len(standby) != 1 or len(active) != 1:
        roles = {c.name: c.redundant_role.value if c.redundant_role else None for c in cards}
        return None, None, f"Expected exactly one standby and one active controller card, got roles {roles}"
    return standby[0], active[0], None


def select_controller_card(inventory: list[ComponentDescriptor], expected: int) -> Selection:
    kind = ComponentType.CONTROLLER_CARD
    cards = find_components_by_type(inventory, kind)
    logger.info("Found controller card list: %s", [c.name for c in cards])
    selection = Selection(kind=kind, discovered=cards, candidates=cards)
    selection.mismatch = count_mismatch(kind, len(cards), expected)
    if len(cards) < 2:
        selection.skip_reason = f"Not enough controller cards for the test: got {len(cards)}, want at least 2"
        return selection
    standby, active, error = find_standby_controller(cards)
    if error:
        selection.error = error
        return selection
    selection.target, selection.active = standby, active
    logger.info("Detected rpStandby: %s, rpActive: %s", standby.name, active.name)
    return selection


def select_linecard(
    inventory: list[ComponentDescriptor], expected: int, only: str | None = None
) -> Selection:
    """``only`` restricts the removable check to one card (the ingress port's card)."""
    kind = ComponentType.LINECARD
    cards = find_components_by_type(inventory, kind)
    logger.info("Found linecard list: %s", [c.name for c in cards])
    candidates = linecard_candidates(cards, expected)
    selection = Selection(kind=kind, discovered=cards, candidates=candidates)
    selection.mismatch = count_mismatch(kind, len(candidates), expected)
    if not candidates:
        selection.skip_reason = "Not enough linecards for the test: got 0, want > 0"
        return selection
    pool = [c for c in candidates if only is None or c.name == only]
    removable = removable_components(pool)
    if not removable:
        return _no_removable(selection, expected)
    selection.target = removable[0]
    return selection


def select_fabric(inventory: list[ComponentDescriptor], expected: int) -> Selection:
    kind = ComponentType.FABRIC
    fabrics = find_components_by_type(inventory, kind)
    logger.info("Found fabric components: %s", [c.name for c in fabrics])
    selection = Selection(kind=kind, discovered=fabrics, candidates=fabrics)
    selection.mismatch = count_mismatch(kind, len(fabrics), expected)
    removable = removable_components(fabrics)
    if not removable:
        return _no_removable(selection, expected)
    selection.target = removable[0]
    return selection


def fpc_from_port(port_name: str) -> str:
    """``et-1/0/0`` -> ``FPC1``; raises ``ValueError`` on other formats."""
    match = _JUNIPER_PORT_RE.match(port_name)
    if match is None:
        raise ValueError(f"invalid port name format: {port_name}")
    return f"FPC{match.group(1)}"
