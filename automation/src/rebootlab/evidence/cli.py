from __future__ import annotations

from rebootlab.adapters.base import CmdResult, run_cmd
from rebootlab.testbed.schema import Endpoint


class CliTransport:
    """Device console commands over ``ssh``; key based auth is expected."""

    def __init__(self, endpoint: Endpoint, binary: str = "ssh", timeout: float = 120.0) -> None:
        self.endpoint = endpoint
        self.binary = binary
        self.timeout = timeout

    def run(self, command: str) -> CmdResult:
        argv = [
            self.binary,
            "-o",
            "BatchMode=yes",
            "-o",
            "StrictHostKeyChecking=no",
            "-p",
            str(self.endpoint.port),
            f"{self.endpoint.username}@{self.endpoint.address}",
            command,
        ]
        return run_cmd(argv, timeout=self.timeout)
