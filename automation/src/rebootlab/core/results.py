from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .model import CheckResult, CheckStatus, Severity


@dataclass(slots=True)
class RunSummary:
    results: list[CheckResult] = field(default_factory=list)

    def add(self, result: CheckResult) -> None:
        self.results.append(result)

    def extend(self, results: list[CheckResult]) -> None:
        self.results.extend(results)

    def counts_by_status(self) -> dict[str, int]:
        counts = {status.value: 0 for status in CheckStatus}
        for r in self.results:
            counts[r.status.value] += 1
        return counts

    def counts_by_case(self) -> dict[str, int]:
        out: dict[str, int] = {}
        for r in self.results:
            out[r.case] = out.get(r.case, 0) + 1
        return out

    def case_status(self, case: str) -> CheckStatus:
        statuses = {r.status for r in self.results if r.case == case}
        if CheckStatus.FAIL in statuses:
            return CheckStatus.FAIL
        if CheckStatus.PASS in statuses:
            return CheckStatus.PASS
        return CheckStatus.SKIP

    @property
    def exit_code(self) -> int:
        return 1 if any(r.status == CheckStatus.FAIL and r.severity == Severity.ERROR for r in self.results) else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "counts_by_status": self.counts_by_status(),
                "counts_by_case": self.counts_by_case(),
                "case_status": {case: self.case_status(case).value for case in self.counts_by_case()},
                "exit_code": self.exit_code,
            },
            "results": [r.to_dict() for r in self.results],
        }
