import copy

from conftest import TESTBED_DATA, FakeClock, FakeDevice, FakeTraffic, active, card, transient
from rebootlab.core.errors import RebootRejectedError, RpcUnimplementedError
from rebootlab.core.model import CommandResult, RebootContext, RedundancyRole
from rebootlab.core.results import RunSummary
from rebootlab.reboot.cases import fabric_reboot, linecard_reboot, standby_controller_card_reboot
from rebootlab.testbed.loader import parse_testbed

CLEAN = CommandResult(output="DEV TRAPCODE NAME COUNT RATE\n  0  12  arp-reply  100  0\n")


def _testbed(**sections):
    data = copy.deepcopy(TESTBED_DATA)
    for key, value in sections.items():
        data[key] = {**data.get(key, {}), **value} if isinstance(value, dict) else value
    return parse_testbed("unit", data)


def _statuses(results) -> dict[str, str]:
    return {r.name: r.status.value for r in results}


def _linecard_device(clock: FakeClock) -> FakeDevice:
    device = FakeDevice(
        [
            card("FPC0", "LINECARD", removable=True),
            card("FPC1", "LINECARD", removable=True),
            card("RE0", "CONTROLLER_CARD", redundant_role=RedundancyRole.PRIMARY),
        ],
        clock=clock,
    )
    device.interfaces = ["et-1/0/0", "et-2/0/0", "et-3/0/0"]
    device.oper_timeline = [(0.0, {"et-1/0/0", "et-2/0/0"}), (5.0, set()), (200.0, {"et-1/0/0", "et-2/0/0", "et-3/0/0"})]
    device.status_script = [active(True), active(True), active(False)]
    device.component_script["FPC1"] = [card("FPC1", "LINECARD"), card("FPC1", "LINECARD", removable=True)]
    device.counters = [100, 9100]
    device.command_script = [CLEAN]
    return device


def test_linecard_reboot_passes(clock: FakeClock) -> None:
    device, traffic = _linecard_device(clock), FakeTraffic()
    results = linecard_reboot(RebootContext("unit", _testbed(), device, traffic, clock))
    assert all(r.status.value == "PASS" for r in results), results
    assert [t.names for t in device.reboots] == [["FPC1"]]
    assert device.reboots[0].method.value == "COLD"
    assert "ingress traffic flowing" in _statuses(results)
    assert device.commands[0].startswith("request pfe execute target fpc1 ")


def test_linecard_interfaces_not_recovered(clock: FakeClock) -> None:
    device, traffic = _linecard_device(clock), FakeTraffic()
    device.oper_timeline = [(0.0, {"et-1/0/0", "et-2/0/0"}), (5.0, {"et-1/0/0"})]
    results = linecard_reboot(RebootContext("unit", _testbed(), device, traffic, clock))
    failed = [r for r in results if r.status.value == "FAIL"]
    assert len(failed) == 1
    assert failed[0].name == "interfaces recovered"
    assert failed[0].evidence["missing"] == ["et-2/0/0"]
    assert traffic.calls == []


def test_linecard_status_unimplemented(clock: FakeClock) -> None:
    device = _linecard_device(clock)
    device.status_script = [RpcUnimplementedError("RebootStatus")]
    results = linecard_reboot(RebootContext("unit", _testbed(), device, FakeTraffic(), clock))
    assert results[-1].name == "reboot status"
    assert results[-1].status.value == "FAIL"
    assert results[-1].evidence["state"] == "UNSUPPORTED_FATAL"
    assert clock.t < 600


def test_linecard_degraded_status_query(clock: FakeClock) -> None:
    device = _linecard_device(clock)
    tb = _testbed(deviations={"gnoi_subcomponent_reboot_status_unsupported": True, "gnoi_subcomponent_path": True})
    linecard_reboot(RebootContext("unit", tb, device, FakeTraffic(), clock))
    assert set(device.status_queries) == {None}
    assert device.reboots[0].subcomponents[0].name_only


def test_linecard_traffic_skipped_on_other_vendors(clock: FakeClock) -> None:
    device = _linecard_device(clock)
    tb = _testbed(dut={"vendor": "arista"})
    results = linecard_reboot(RebootContext("unit", tb, device, None, clock))
    statuses = _statuses(results)
    assert statuses["traffic drop"] == "SKIP"
    summary = RunSummary(results)
    assert summary.case_status("linecard-reboot").value == "PASS"


def test_standby_controller_reboot(clock: FakeClock) -> None:
    device = FakeDevice(
        [
            card("RE0", "CONTROLLER_CARD", redundant_role=RedundancyRole.PRIMARY),
            card("RE1", "CONTROLLER_CARD", redundant_role=RedundancyRole.SECONDARY),
        ],
        clock=clock,
    )
    device.component_script["RE1"] = [card("RE1", "CONTROLLER_CARD"), card("RE1", "CONTROLLER_CARD", redundant_role=RedundancyRole.SECONDARY)]
    results = standby_controller_card_reboot(RebootContext("unit", _testbed(expected={"controller_cards": 2}), device, None, clock))
    assert _statuses(results) == {"target selected": "PASS", "reboot accepted": "PASS", "standby recovered": "PASS"}
    assert results[-1].evidence["boot_time"] == 70.0
    assert device.reboots[0].names == ["RE1"]


def test_single_controller_skips_but_mismatch_fails(clock: FakeClock) -> None:
    device = FakeDevice([card("RE0", "CONTROLLER_CARD", redundant_role=RedundancyRole.PRIMARY)], clock=clock)
    results = standby_controller_card_reboot(RebootContext("unit", _testbed(expected={"controller_cards": 2}), device, None, clock))
    assert _statuses(results) == {"controller cards count": "FAIL", "precondition": "SKIP"}
    assert device.reboots == []

    results = standby_controller_card_reboot(RebootContext("unit", _testbed(), device, None, clock))
    assert _statuses(results) == {"precondition": "SKIP"}


def test_reboot_rejected(clock: FakeClock) -> None:
    device = _linecard_device(clock)
    device.reboot_error = RebootRejectedError("reboot of active control processor pending", code="FailedPrecondition")
    results = linecard_reboot(RebootContext("unit", _testbed(), device, FakeTraffic(), clock))
    assert results[-1].status.value == "FAIL"
    assert "pending" in results[-1].message
    assert device.status_queries == []


def test_fabric_deviation_skips(clock: FakeClock) -> None:
    tb = _testbed(deviations={"gnoi_fabric_component_reboot_unsupported": True})
    results = fabric_reboot(RebootContext("unit", tb, FakeDevice(clock=clock), None, clock))
    assert _statuses(results) == {"precondition": "SKIP"}


def test_fabric_reboot_times_out(clock: FakeClock) -> None:
    device = FakeDevice([card("SIB0", "FABRIC", removable=True, oper_status="ACTIVE")], clock=clock)
    device.status_script = [active(True)]
    results = fabric_reboot(RebootContext("unit", _testbed(), device, None, clock))
    assert results[-1].name == "reboot status"
    assert results[-1].evidence["state"] == "TIMED_OUT"
    assert results[-1].evidence["last_active"] is True
    assert results[-1].message.startswith("reboot still active")


def test_fabric_status_never_answered(clock: FakeClock) -> None:
    device = FakeDevice([card("SIB0", "FABRIC", removable=True, oper_status="ACTIVE")], clock=clock)
    device.status_script = [transient()]
    results = fabric_reboot(RebootContext("unit", _testbed(), device, None, clock))
    assert results[-1].evidence["state"] == "TIMED_OUT"
    assert results[-1].evidence["last_active"] is None
    assert results[-1].message.startswith("no successful RebootStatus response within")
    assert len(device.status_queries) > 1


def test_fabric_reboot_passes(clock: FakeClock) -> None:
    device = FakeDevice([card("SIB0", "FABRIC"), card("SIB1", "FABRIC", removable=True)], clock=clock)
    device.interfaces = ["et-1/0/0"]
    device.oper_timeline = [(0.0, {"et-1/0/0"})]
    device.status_script = [active(True), active(False)]
    device.component_script["SIB1"] = [card("SIB1", "FABRIC", oper_status="INACTIVE"), card("SIB1", "FABRIC", oper_status="ACTIVE")]
    results = fabric_reboot(RebootContext("unit", _testbed(expected={"fabrics": 2}), device, None, clock))
    assert all(r.status.value == "PASS" for r in results), results
    assert device.reboots[0].names == ["SIB1"]
