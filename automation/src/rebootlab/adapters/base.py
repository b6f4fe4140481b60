from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CmdResult:
    rc: int
    stdout: str
    stderr: str


def run_cmd(argv: list[str], timeout: float | None = None, stdin: str | None = None) -> CmdResult:
    logger.debug("exec: %s", argv[0])
    try:
        p = subprocess.run(argv, input=stdin, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        return CmdResult(124, "", f"{argv[0]} timed out after {timeout}s")
    except FileNotFoundError:
        return CmdResult(127, "", f"{argv[0]}: command not found")
    return CmdResult(p.returncode, p.stdout.strip(), p.stderr.strip())
