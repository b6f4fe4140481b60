from __future__ import annotations

from dataclasses import fields
from pathlib import Path

from rebootlab.core.errors import InvalidTestbedError
from rebootlab.utils.yaml import load_yaml

from .schema import DutSpec, Deviations, Endpoint, ExpectedCounts, TestbedModel, Timeouts, TrafficSpec


def _required(data: dict, key: str):
    if key not in data:
        raise InvalidTestbedError(f"Missing required key: {key}")
    return data[key]


def _endpoint(data: dict, default_port: int, fallback: dict) -> Endpoint:
    return Endpoint(
        address=str(data.get("address", fallback.get("address", ""))),
        port=int(data.get("port", default_port)),
        username=str(data.get("username", fallback.get("username", "admin"))),
        password=str(data.get("password", fallback.get("password", "admin"))),
        skip_verify=bool(data.get("skip_verify", fallback.get("skip_verify", True))),
    )


def _count(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidTestbedError(f"Expected count must be an integer, got {value!r}") from exc


def parse_testbed(lab: str, data: dict) -> TestbedModel:
    dut_data = _required(data, "dut")
    address = str(_required(dut_data, "address"))
    creds = {
        "address": address,
        "username": dut_data.get("username", "admin"),
        "password": dut_data.get("password", "admin"),
        "skip_verify": dut_data.get("skip_verify", True),
    }
    ports = {str(k): str(v) for k, v in dict(dut_data.get("ports", {})).items()}
    dut = DutSpec(
        name=str(dut_data.get("name", "dut")),
        vendor=str(dut_data.get("vendor", "unknown")).upper(),
        model=str(dut_data.get("model", "unknown")),
        ports=ports,
        gnmi=_endpoint(dict(dut_data.get("gnmi", {})), 9339, creds),
        gnoi=_endpoint(dict(dut_data.get("gnoi", {})), 9339, creds),
        ssh=_endpoint(dict(dut_data.get("ssh", {})), 22, creds),
    )

    exp = dict(data.get("expected", {}))
    expected = ExpectedCounts(
        controller_cards=_count(exp.get("controller_cards", -1)),
        linecards=_count(exp.get("linecards", -1)),
        fabrics=_count(exp.get("fabrics", -1)),
    )

    tmo = dict(data.get("timeouts", {}))
    defaults = Timeouts()
    timeouts = Timeouts(**{name: float(tmo.get(name, getattr(defaults, name))) for name in [f.name for f in fields(Timeouts)]})

    dev = dict(data.get("deviations", {}))
    unknown = set(dev) - {f.name for f in fields(Deviations)}
    if unknown:
        raise InvalidTestbedError(f"Unknown deviations: {sorted(unknown)}")
    deviations = Deviations(**{k: bool(v) for k, v in dev.items()})

    traffic_data = dict(data.get("traffic", {}))
    traffic = TrafficSpec(
        otg_url=traffic_data.get("otg_url"),
        flow_name=str(traffic_data.get("flow_name", "flow-ipv4")),
        iterations=int(traffic_data.get("iterations", 10)),
        interval=float(traffic_data.get("interval", 30)),
        trapstats_command=str(traffic_data.get("trapstats_command", TrafficSpec().trapstats_command)),
        ingress_port=str(traffic_data.get("ingress_port", "port1")),
        verify_tls=bool(traffic_data.get("verify_tls", False)),
    )
    if traffic.iterations < 1:
        raise InvalidTestbedError("traffic.iterations must be at least 1")

    return TestbedModel(
        lab_name=lab,
        dut=dut,
        expected=expected,
        timeouts=timeouts,
        deviations=deviations,
        traffic=traffic,
        check_interfaces_in_binding=bool(data.get("check_interfaces_in_binding", False)),
    )


def load_testbed(repo_root: Path, lab: str) -> TestbedModel:
    path = repo_root / lab / "testbed.yml"
    return parse_testbed(lab, load_yaml(path))
