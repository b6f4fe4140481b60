from __future__ import annotations

import logging
from pathlib import Path

import typer

from rebootlab.core.errors import RebootlabError
from rebootlab.core.logging import configure_logging
from rebootlab.core.model import CheckResult, CheckStatus, RebootContext, Severity
from rebootlab.core.results import RunSummary
from rebootlab.evidence.cli import CliTransport
from rebootlab.evidence.client import EvidenceClient
from rebootlab.evidence.gnmi import GnmiTransport
from rebootlab.evidence.gnoi import GnoiTransport
from rebootlab.reboot.cases import default_registry
from rebootlab.render.report_json import write_json_report
from rebootlab.render.report_md import write_markdown_report
from rebootlab.testbed.loader import load_testbed
from rebootlab.traffic.otg import OtgTrafficGenerator

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _ctx(lab: str, root: Path | None) -> RebootContext:
    testbed = load_testbed(root or _repo_root(), lab)
    client = EvidenceClient(
        gnmi=GnmiTransport(testbed.dut.gnmi),
        gnoi=GnoiTransport(testbed.dut.gnoi),
        cli=CliTransport(testbed.dut.ssh),
    )
    traffic = None
    if testbed.traffic.otg_url:
        traffic = OtgTrafficGenerator(
            testbed.traffic.otg_url,
            flow_names=[testbed.traffic.flow_name],
            verify=testbed.traffic.verify_tls,
        )
    return RebootContext(lab=lab, testbed=testbed, client=client, traffic=traffic)


def _print_console(summary: RunSummary) -> None:
    for result in summary.results:
        typer.echo(f"[{result.case}] {result.status.value:4} {result.name} - {result.message}")
    typer.echo(f"Exit code: {summary.exit_code}")


def _run_cases(ctx: RebootContext, selection: str) -> RunSummary:
    summary = RunSummary()
    for name, case in default_registry().resolve(selection):
        try:
            summary.extend(case(ctx))
        except Exception as exc:
            logger.exception("Case %s crashed", name)
            summary.add(
                CheckResult(
                    case=name,
                    name=case.__name__,
                    status=CheckStatus.FAIL,
                    severity=Severity.ERROR,
                    message=f"Case crashed: {exc}",
                )
            )
    return summary


@app.command()
def run(
    lab: str = typer.Option(..., "--lab"),
    case: str = typer.Option("all", "--case"),
    root: Path | None = typer.Option(None, "--root"),
    num_controller_cards: int | None = typer.Option(None, "--num-controller-cards"),
    num_linecards: int | None = typer.Option(None, "--num-linecards"),
    num_fabrics: int | None = typer.Option(None, "--num-fabrics"),
    json_out: Path | None = typer.Option(None, "--json-out"),
    md_out: Path | None = typer.Option(None, "--md-out"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    configure_logging(verbose)
    cases = default_registry().names()
    if case not in {*cases, "all"}:
        raise typer.BadParameter(f"case must be {'|'.join(cases)}|all")

    try:
        ctx = _ctx(lab, root)
    except RebootlabError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)

    expected = ctx.testbed.expected
    if num_controller_cards is not None:
        expected.controller_cards = num_controller_cards
    if num_linecards is not None:
        expected.linecards = num_linecards
    if num_fabrics is not None:
        expected.fabrics = num_fabrics

    summary = _run_cases(ctx, case)
    payload = {"lab": lab, **summary.to_dict()}
    _print_console(summary)

    out_json = json_out or Path("artifacts") / f"{lab}-reboot.json"
    out_md = md_out or Path("artifacts") / f"{lab}-reboot.md"
    write_json_report(payload, out_json)
    write_markdown_report(payload, out_md)
    raise typer.Exit(code=summary.exit_code)


@app.command()
def inventory(
    lab: str = typer.Option(..., "--lab"),
    root: Path | None = typer.Option(None, "--root"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    configure_logging(verbose)
    try:
        ctx = _ctx(lab, root)
        components = ctx.client.list_components()
    except RebootlabError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)

    for c in sorted(components, key=lambda c: (c.type or "", c.name)):
        role = c.redundant_role.value if c.redundant_role else "-"
        typer.echo(
            f"{c.name:24} {c.type or '-':18} removable={c.removable} empty={c.empty} role={role} oper={c.oper_status or '-'}"
        )


if __name__ == "__main__":
    app()
