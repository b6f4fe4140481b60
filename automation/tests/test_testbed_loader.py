from pathlib import Path

import pytest

from rebootlab.core.errors import InvalidTestbedError
from rebootlab.testbed.loader import load_testbed, parse_testbed


def test_load_sample_testbed() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    testbed = load_testbed(repo_root, "ptx-modular")
    assert testbed.dut.vendor == "JUNIPER"
    assert testbed.port_name("port1") == "et-1/0/0"
    assert testbed.expected.linecards == 4
    assert testbed.timeouts.poll_interval == 10.0
    assert testbed.dut.gnoi.target == "192.0.2.10:32767"


def test_defaults_disable_count_checks() -> None:
    testbed = parse_testbed("x", {"dut": {"address": "10.0.0.1"}})
    assert (testbed.expected.controller_cards, testbed.expected.linecards, testbed.expected.fabrics) == (-1, -1, -1)
    assert testbed.timeouts.linecard_boot_time == 600.0
    assert testbed.timeouts.fabric_interfaces_recovery == 300.0
    assert testbed.dut.gnmi.port == 9339
    assert testbed.dut.ssh.port == 22
    assert not testbed.deviations.gnoi_subcomponent_path


def test_missing_dut_rejected() -> None:
    with pytest.raises(InvalidTestbedError):
        parse_testbed("x", {"expected": {"linecards": 2}})


def test_unknown_deviation_rejected() -> None:
    with pytest.raises(InvalidTestbedError):
        parse_testbed("x", {"dut": {"address": "10.0.0.1"}, "deviations": {"no_such_thing": True}})


def test_non_integer_count_rejected() -> None:
    with pytest.raises(InvalidTestbedError):
        parse_testbed("x", {"dut": {"address": "10.0.0.1"}, "expected": {"fabrics": "many"}})


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InvalidTestbedError):
        load_testbed(tmp_path, "nope")
