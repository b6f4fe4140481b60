from __future__ import annotations


class RebootlabError(Exception):
    """Base error for rebootlab exceptions."""


class InvalidTestbedError(RebootlabError):
    """Raised when testbed yaml is invalid."""


class CaseSkipped(RebootlabError):
    """Environment precondition not met; the case is skipped, not failed."""


class TopologyMismatchError(RebootlabError):
    """Discovered component count disagrees with the declared count."""

    def __init__(self, kind: str, got: int, want: int) -> None:
        super().__init__(f"Incorrect number of {kind}: got {got}, want exactly {want}")
        self.kind = kind
        self.got = got
        self.want = want


class SelectionError(RebootlabError):
    """No usable reboot target on a device that should have one."""


class RemoteError(RebootlabError):
    """A remote read or RPC failed."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class RpcUnimplementedError(RemoteError):
    """The remote end does not implement the requested RPC."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="Unimplemented")


class RebootRejectedError(RemoteError):
    """The device refused the reboot request."""

    def __init__(self, reason: str, code: str | None = None) -> None:
        super().__init__(f"Reboot rejected: {reason}", code=code)
        self.reason = reason


class DeviceCommandError(RebootlabError):
    """A console command returned a non-empty error."""

    def __init__(self, command: str, error: str) -> None:
        super().__init__(f"could not fetch output for: {command}, err: {error}")
        self.command = command
        self.error = error


class TrapStatsParseError(RebootlabError):
    """A table row did not match the trap statistics column grammar."""

    def __init__(self, message: str, line: str) -> None:
        super().__init__(f"{message}: {line}")
        self.line = line


class WaitTimeoutError(RebootlabError):
    """A bounded wait ended without reaching the target state."""

    def __init__(self, what: str, elapsed: float, last_value: object) -> None:
        super().__init__(f"{what} did not reach target state within {elapsed:.1f}s: got {last_value!r}")
        self.what = what
        self.elapsed = elapsed
        self.last_value = last_value
