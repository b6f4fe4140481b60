from typer.testing import CliRunner

from conftest import TESTBED_DATA, FakeDevice, card
from rebootlab import cli
from rebootlab.core.model import RebootContext, RedundancyRole
from rebootlab.testbed.loader import parse_testbed

runner = CliRunner()


def test_unknown_case_rejected() -> None:
    result = runner.invoke(cli.app, ["run", "--lab", "ptx-modular", "--case", "chassis"])
    assert result.exit_code == 2


def test_missing_lab_reported(tmp_path) -> None:
    result = runner.invoke(cli.app, ["run", "--lab", "nope", "--root", str(tmp_path)])
    assert result.exit_code == 2


def test_inventory_lists_components(monkeypatch) -> None:
    device = FakeDevice([card("RE1", "CONTROLLER_CARD", redundant_role=RedundancyRole.SECONDARY), card("FPC0", "LINECARD")])
    monkeypatch.setattr(cli, "_ctx", lambda lab, root: RebootContext(lab, None, device))
    result = runner.invoke(cli.app, ["inventory", "--lab", "ptx-modular"])
    assert result.exit_code == 0
    assert "role=SECONDARY" in result.output
    assert "FPC0" in result.output


def test_run_writes_reports_and_overrides_counts(monkeypatch, tmp_path) -> None:
    device = FakeDevice([card("RE0", "CONTROLLER_CARD", redundant_role=RedundancyRole.PRIMARY)])
    ctx = RebootContext("unit", parse_testbed("unit", TESTBED_DATA), device)
    monkeypatch.setattr(cli, "_ctx", lambda lab, root: ctx)
    json_out, md_out = tmp_path / "r.json", tmp_path / "r.md"
    result = runner.invoke(
        cli.app,
        ["run", "--lab", "unit", "--case", "controller", "--num-controller-cards", "2", "--json-out", str(json_out), "--md-out", str(md_out)],
    )
    assert result.exit_code == 1
    assert ctx.testbed.expected.controller_cards == 2
    assert "controller cards count" in md_out.read_text(encoding="utf-8")
    assert '"exit_code": 1' in json_out.read_text(encoding="utf-8")
