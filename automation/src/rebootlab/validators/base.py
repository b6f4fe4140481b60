from rebootlab.core.model import CheckResult, CheckStatus, Severity


def make_result(case: str, name: str, ok: bool, message: str, evidence: dict | None = None) -> CheckResult:
    return CheckResult(
        case=case,
        name=name,
        status=CheckStatus.PASS if ok else CheckStatus.FAIL,
        severity=Severity.INFO if ok else Severity.ERROR,
        message=message,
        evidence=evidence or {},
    )


def skip_result(case: str, name: str, message: str, evidence: dict | None = None) -> CheckResult:
    return CheckResult(
        case=case,
        name=name,
        status=CheckStatus.SKIP,
        severity=Severity.INFO,
        message=message,
        evidence=evidence or {},
    )
