from __future__ import annotations

import logging

from rebootlab.core.errors import CaseSkipped, RebootlabError, WaitTimeoutError
from rebootlab.core.model import CheckResult
from rebootlab.validators.base import make_result, skip_result

logger = logging.getLogger(__name__)


class CaseFailed(RebootlabError):
    """A failure already recorded on the recorder; ends the case."""


class CaseRecorder:
    """Collect the results of one case and end it on the first hard failure.

    Used as a context manager around the case body: a skip or a rebootlab
    error stops the case and becomes a result; anything else propagates.
    """

    def __init__(self, case: str) -> None:
        self.case = case
        self.results: list[CheckResult] = []

    def check(self, name: str, ok: bool, message: str, evidence: dict | None = None) -> bool:
        result = make_result(self.case, name, ok, message, evidence)
        if ok:
            logger.info("[%s] PASS %s - %s", self.case, name, message)
        else:
            logger.error("[%s] FAIL %s - %s", self.case, name, message)
        self.results.append(result)
        return ok

    def fail(self, name: str, message: str, evidence: dict | None = None) -> None:
        self.check(name, False, message, evidence)
        raise CaseFailed(message)

    def info(self, name: str, message: str, evidence: dict | None = None) -> None:
        logger.info("[%s] SKIP %s - %s", self.case, name, message)
        self.results.append(skip_result(self.case, name, message, evidence))

    def __enter__(self) -> CaseRecorder:
        logger.info("=== %s", self.case)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None or isinstance(exc, CaseFailed):
            return exc is not None
        if isinstance(exc, CaseSkipped):
            self.info("precondition", str(exc))
            return True
        if isinstance(exc, WaitTimeoutError):
            self.check(exc.what, False, str(exc), {"elapsed": round(exc.elapsed, 1), "last_value": repr(exc.last_value)})
            return True
        if isinstance(exc, RebootlabError):
            self.check(type(exc).__name__, False, str(exc))
            return True
        return False
