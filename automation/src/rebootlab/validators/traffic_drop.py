from __future__ import annotations

import logging
from dataclasses import dataclass, field

from rebootlab.core.errors import DeviceCommandError, RemoteError, TrapStatsParseError
from rebootlab.core.model import CheckResult, TrapStatRecord
from rebootlab.evidence.transport_base import DeviceClient
from rebootlab.parsers.trapstats import nonzero_rates, parse_trap_stats
from rebootlab.testbed.schema import TRAPSTATS_COMMAND
from rebootlab.traffic.base import TrafficGenerator
from rebootlab.utils.time import Clock, SystemClock
from rebootlab.validators.base import make_result

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DropViolation:
    iteration: int
    record: TrapStatRecord

    def to_dict(self) -> dict:
        return {"iteration": self.iteration, "name": self.record.name, "trap_code": self.record.trap_code, "rate": self.record.rate}


@dataclass(slots=True)
class TrafficDropReport:
    command: str
    iterations_run: int = 0
    violations: list[DropViolation] = field(default_factory=list)
    abort_error: str | None = None
    cleanup_errors: list[str] = field(default_factory=list)
    in_pkts_before: int | None = None
    in_pkts_after: int | None = None

    @property
    def counters_increased(self) -> bool:
        if self.in_pkts_before is None or self.in_pkts_after is None:
            return False
        return self.in_pkts_after > self.in_pkts_before

    @property
    def ok(self) -> bool:
        return not self.violations and self.abort_error is None and not self.cleanup_errors and self.counters_increased


class TrafficDropMonitor:
    """Watch PFE trap rates on a line card while traffic is flowing.

    Every sample is parsed and any non-zero trap rate is a violation; all
    iterations still run. A command error or unparseable output stops the
    sampling since nothing more can be observed.
    """

    def __init__(
        self,
        client: DeviceClient,
        traffic: TrafficGenerator,
        clock: Clock | None = None,
        iterations: int = 10,
        interval: float = 30.0,
        command_template: str = TRAPSTATS_COMMAND,
    ) -> None:
        self.client = client
        self.traffic = traffic
        self.clock = clock or SystemClock()
        self.iterations = iterations
        self.interval = interval
        self.command_template = command_template

    def command_for(self, linecard: str) -> str:
        return self.command_template.format(linecard=linecard.lower())

    def sample(self, command: str) -> list[TrapStatRecord]:
        result = self.client.run_command(command)
        if result.error:
            raise DeviceCommandError(command, result.error)
        return parse_trap_stats(result.output)

    def _in_pkts(self, interface: str) -> int | None:
        return self.client.interface_counters(interface).in_pkts

    def _sample_window(self, report: TrafficDropReport) -> None:
        for idx in range(self.iterations):
            self.clock.sleep(self.interval)
            try:
                records = self.sample(report.command)
            except (DeviceCommandError, TrapStatsParseError, RemoteError) as exc:
                logger.error("Stopping trap stats sampling at iteration %d: %s", idx, exc)
                report.abort_error = str(exc)
                return
            report.iterations_run += 1
            for record in nonzero_rates(records):
                logger.error("found non-zero rate for stat: %s, rate: %d", record.name, record.rate)
                report.violations.append(DropViolation(idx, record))

    def _stop(self, report: TrafficDropReport, stop) -> None:
        try:
            stop()
        except RemoteError as exc:
            logger.error("Traffic generator %s failed: %s", stop.__name__, exc)
            report.cleanup_errors.append(f"{stop.__name__}: {exc}")

    def run(self, linecard: str, ingress_interface: str) -> TrafficDropReport:
        report = TrafficDropReport(command=self.command_for(linecard))
        report.in_pkts_before = self._in_pkts(ingress_interface)
        logger.info("initial incoming packets: %s", report.in_pkts_before)

        started = []
        try:
            try:
                self.traffic.start_protocols()
                started.append(self.traffic.stop_protocols)
                self.traffic.start_traffic()
                started.append(self.traffic.stop_traffic)
            except RemoteError as exc:
                logger.error("Traffic generator failed to start: %s", exc)
                report.abort_error = f"traffic generator failed to start: {exc}"
            else:
                self._sample_window(report)
        finally:
            for stop in reversed(started):
                self._stop(report, stop)

        report.in_pkts_after = self._in_pkts(ingress_interface)
        logger.info("final incoming packets: %s", report.in_pkts_after)
        return report


def drop_results(case: str, report: TrafficDropReport) -> list[CheckResult]:
    out = [
        make_result(
            case,
            "trap rates zero",
            not report.violations,
            f"{len(report.violations)} non-zero trap rate samples over {report.iterations_run} iterations",
            {"violations": [v.to_dict() for v in report.violations], "command": report.command},
        )
    ]
    if report.abort_error is not None:
        out.append(make_result(case, "trap stats sampling", False, report.abort_error, {"command": report.command}))
    if report.cleanup_errors:
        out.append(
            make_result(
                case,
                "traffic generator stopped",
                False,
                "; ".join(report.cleanup_errors),
                {"errors": report.cleanup_errors},
            )
        )
    out.append(
        make_result(
            case,
            "ingress traffic flowing",
            report.counters_increased,
            "incoming packets increased" if report.counters_increased else "incoming packets did not change after traffic was started",
            {"before": report.in_pkts_before, "after": report.in_pkts_after},
        )
    )
    return out
