"""Component reboot cases.

Each case issues a gNOI COLD reboot to a single subcomponent and then checks,
independently of the device's own claims, that the component came back and
that nothing else was disturbed:

* standby controller card: the standby RP reports its redundant role again.
* line card: RebootStatus goes inactive, the card is reported removable again,
  every interface that was up is up again and no PFE traps fire under traffic.
* fabric: RebootStatus goes inactive, the fabric is ACTIVE again and every
  interface that was up is up again.

Only the standby RP is rebooted; rebooting the active RP is a chassis reboot
or switchover on most platforms.
"""

from __future__ import annotations

import logging

from rebootlab.core.errors import CaseSkipped, SelectionError, WaitTimeoutError
from rebootlab.core.model import (
    CheckResult,
    CheckStatus,
    PollResult,
    PollState,
    RebootContext,
    RebootTarget,
)
from rebootlab.core.registry import CaseRegistry
from rebootlab.reboot.poller import RebootStatusPoller
from rebootlab.reboot.recorder import CaseRecorder
from rebootlab.selection.components import Selection, fpc_from_port, select_controller_card, select_fabric, select_linecard
from rebootlab.utils.time import Clock, SystemClock
from rebootlab.validators.oper_status import (
    await_component_state,
    await_interfaces_recovered,
    fetch_oper_up_interfaces,
    missing_interfaces,
)
from rebootlab.validators.traffic_drop import TrafficDropMonitor, drop_results

logger = logging.getLogger(__name__)

CONTROLLER_CASE = "standby-controller-card-reboot"
LINECARD_CASE = "linecard-reboot"
FABRIC_CASE = "fabric-reboot"

JUNIPER = "JUNIPER"
COMPONENT_ACTIVE = "ACTIVE"


def _clock(ctx: RebootContext) -> Clock:
    if ctx.clock is None:
        ctx.clock = SystemClock()
    return ctx.clock


def _apply_selection(rec: CaseRecorder, selection: Selection) -> None:
    if selection.mismatch is not None:
        rec.check(
            f"{selection.label} count",
            False,
            str(selection.mismatch),
            {"got": selection.mismatch.got, "want": selection.mismatch.want},
        )
    if selection.skip_reason:
        raise CaseSkipped(selection.skip_reason)
    if selection.error:
        raise SelectionError(selection.error)
    rec.check(
        "target selected",
        True,
        f"{selection.target.name} selected for reboot",
        {"candidates": [c.name for c in selection.candidates]},
    )


def _issue_reboot(rec: CaseRecorder, ctx: RebootContext, target: RebootTarget) -> None:
    logger.info("Reboot request: method=%s subcomponents=%s", target.method.value, [str(p) for p in target.subcomponents])
    ctx.client.issue_reboot(target)
    rec.check("reboot accepted", True, f"{target.method.value} reboot of {', '.join(target.names)} accepted")


def _target(ctx: RebootContext, selection: Selection) -> RebootTarget:
    return RebootTarget.for_component(selection.target, name_only=ctx.testbed.deviations.gnoi_subcomponent_path)


def _check_poll(rec: CaseRecorder, result: PollResult) -> None:
    evidence = {
        "state": result.state.value,
        "queries": result.queries,
        "elapsed": round(result.elapsed, 1),
        "last_active": result.last_sample.active if result.last_sample else None,
    }
    if result.state == PollState.COMPLETED:
        rec.check("reboot status", True, f"reboot completed after {result.elapsed:.0f}s", evidence)
    elif result.state == PollState.UNSUPPORTED_FATAL:
        rec.fail("reboot status", "Unimplemented RebootStatus() is not fully compliant with gNOI Reboot", evidence)
    elif result.last_sample is None:
        rec.fail("reboot status", f"no successful RebootStatus response within {result.elapsed:.0f}s", evidence)
    else:
        rec.fail("reboot status", f"reboot still active after {result.elapsed:.0f}s", evidence)


def _binding(ctx: RebootContext) -> list[str] | None:
    if not ctx.testbed.check_interfaces_in_binding:
        return None
    return sorted(ctx.testbed.dut.ports.values())


def _await_interfaces(rec: CaseRecorder, ctx: RebootContext, before, timeout: float) -> None:
    try:
        await_interfaces_recovered(ctx.client, before, timeout, _clock(ctx))
    except WaitTimeoutError as exc:
        missing = missing_interfaces(before, exc.last_value)
        rec.fail(
            "interfaces recovered",
            f"{len(missing)} interfaces not up within {timeout:.0f}s",
            {"missing": missing, "elapsed": round(exc.elapsed, 1)},
        )
    rec.check("interfaces recovered", True, f"{len(before.up)} interfaces up again", {"interfaces": sorted(before.up)})


def standby_controller_card_reboot(ctx: RebootContext) -> list[CheckResult]:
    tb, clock = ctx.testbed, _clock(ctx)
    with CaseRecorder(CONTROLLER_CASE) as rec:
        selection = select_controller_card(ctx.client.list_components(), tb.expected.controller_cards)
        _apply_selection(rec, selection)
        standby = selection.target

        target = _target(ctx, selection)
        start = clock.now()
        _issue_reboot(rec, ctx, target)

        logger.info("Wait %.0fs to allow the sub component's reboot process to start", tb.timeouts.controller_start_delay)
        clock.sleep(tb.timeouts.controller_start_delay)

        state = await_component_state(
            ctx.client,
            standby.name,
            lambda c: c.redundant_role is not None,
            tb.timeouts.controller_boot_time,
            clock,
            "redundant-role",
        )
        boot_time = clock.now() - start
        rec.check(
            "standby recovered",
            True,
            f"Standby controller boot time: {boot_time:.2f} seconds",
            {"redundant_role": state.redundant_role.value, "boot_time": round(boot_time, 2)},
        )
    return rec.results


def _linecard_to_reboot(ctx: RebootContext) -> str | None:
    """On Juniper the card hosting the ingress port is the one rebooted."""
    if ctx.testbed.dut.vendor != JUNIPER:
        return None
    port_id = ctx.testbed.traffic.ingress_port
    try:
        card = fpc_from_port(ctx.testbed.port_name(port_id))
    except (KeyError, ValueError) as exc:
        raise SelectionError(f"Failed to get line card to reboot: {exc}") from exc
    logger.info("line card to reboot: %s", card)
    return card


def _traffic_drop(rec: CaseRecorder, ctx: RebootContext, linecard: str) -> None:
    tb = ctx.testbed
    if tb.dut.vendor != JUNIPER:
        rec.info("traffic drop", f"trap statistics are not collected on {tb.dut.vendor}")
        return
    if ctx.traffic is None:
        rec.info("traffic drop", "no traffic generator configured")
        return
    monitor = TrafficDropMonitor(
        ctx.client,
        ctx.traffic,
        clock=_clock(ctx),
        iterations=tb.traffic.iterations,
        interval=tb.traffic.interval,
        command_template=tb.traffic.trapstats_command,
    )
    report = monitor.run(linecard, tb.port_name(tb.traffic.ingress_port))
    for result in drop_results(rec.case, report):
        rec.check(result.name, result.status == CheckStatus.PASS, result.message, result.evidence)


def linecard_reboot(ctx: RebootContext) -> list[CheckResult]:
    tb, clock = ctx.testbed, _clock(ctx)
    with CaseRecorder(LINECARD_CASE) as rec:
        only = _linecard_to_reboot(ctx)
        selection = select_linecard(ctx.client.list_components(), tb.expected.linecards, only=only)
        _apply_selection(rec, selection)
        linecard = selection.target

        before = fetch_oper_up_interfaces(ctx.client, only=_binding(ctx))
        logger.info("OperStatusUP interfaces before reboot: %s", sorted(before.up))

        target = _target(ctx, selection)
        _issue_reboot(rec, ctx, target)
        logger.info("Wait %.0fs to allow the sub component's reboot process to start", tb.timeouts.linecard_start_delay)
        clock.sleep(tb.timeouts.linecard_start_delay)

        poller = RebootStatusPoller(ctx.client, clock, interval=tb.timeouts.poll_interval)
        degraded = tb.deviations.gnoi_subcomponent_reboot_status_unsupported
        _check_poll(rec, poller.poll(target, tb.timeouts.linecard_boot_time, degraded=degraded))

        logger.info("Validate removable linecard %s status", linecard.name)
        await_component_state(
            ctx.client,
            linecard.name,
            lambda c: c.removable is True,
            tb.timeouts.linecard_boot_time,
            clock,
            "removable",
        )
        rec.check("linecard recovered", True, f"{linecard.name} reports removable again")

        _await_interfaces(rec, ctx, before, tb.timeouts.linecard_interfaces_recovery)
        _traffic_drop(rec, ctx, linecard.name)
    return rec.results


def fabric_reboot(ctx: RebootContext) -> list[CheckResult]:
    tb, clock = ctx.testbed, _clock(ctx)
    with CaseRecorder(FABRIC_CASE) as rec:
        if tb.deviations.gnoi_fabric_component_reboot_unsupported:
            raise CaseSkipped("Skipping test due to deviation gnoi_fabric_component_reboot_unsupported")
        selection = select_fabric(ctx.client.list_components(), tb.expected.fabrics)
        _apply_selection(rec, selection)
        fabric = selection.target

        before = fetch_oper_up_interfaces(ctx.client, only=_binding(ctx))
        logger.info("OperStatusUP interfaces before reboot: %s", sorted(before.up))

        target = _target(ctx, selection)
        _issue_reboot(rec, ctx, target)

        poller = RebootStatusPoller(ctx.client, clock, interval=tb.timeouts.poll_interval)
        degraded = tb.deviations.gnoi_subcomponent_reboot_status_unsupported
        _check_poll(rec, poller.poll(target, tb.timeouts.fabric_boot_time, degraded=degraded))

        logger.info("Validate removable fabric component %s status", fabric.name)
        await_component_state(
            ctx.client,
            fabric.name,
            lambda c: c.oper_status == COMPONENT_ACTIVE,
            tb.timeouts.fabric_boot_time,
            clock,
            "oper-status",
        )
        rec.check("fabric recovered", True, f"{fabric.name} is {COMPONENT_ACTIVE}")

        _await_interfaces(rec, ctx, before, tb.timeouts.fabric_interfaces_recovery)
    return rec.results


def default_registry() -> CaseRegistry:
    registry = CaseRegistry()
    registry.register("controller", standby_controller_card_reboot)
    registry.register("linecard", linecard_reboot)
    registry.register("fabric", fabric_reboot)
    return registry
