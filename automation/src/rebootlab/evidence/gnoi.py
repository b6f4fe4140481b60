from __future__ import annotations

import json
import logging
import re
from typing import Any

from rebootlab.adapters.base import CmdResult, run_cmd
from rebootlab.core.errors import RebootRejectedError, RemoteError, RpcUnimplementedError
from rebootlab.core.model import RebootStatusSample, RebootTarget, SubcomponentPath
from rebootlab.testbed.schema import Endpoint

logger = logging.getLogger(__name__)

REBOOT_RPC = "gnoi.system.System/Reboot"
REBOOT_STATUS_RPC = "gnoi.system.System/RebootStatus"

_CODE_RE = re.compile(r"Code:\s*(\w+)")
_MESSAGE_RE = re.compile(r"Message:\s*(.*)")

# Status codes a device uses to refuse a reboot while another one is pending.
_REJECT_CODES = {"FailedPrecondition", "AlreadyExists", "Aborted", "InvalidArgument"}


def _path_json(path: SubcomponentPath) -> dict[str, Any]:
    return {"elem": path.elems}


def reboot_request(target: RebootTarget) -> dict[str, Any]:
    return {
        "method": target.method.value,
        "subcomponents": [_path_json(p) for p in target.subcomponents],
    }


def reboot_status_request(subcomponents: tuple[SubcomponentPath, ...] | None) -> dict[str, Any]:
    if not subcomponents:
        return {}
    return {"subcomponents": [_path_json(p) for p in subcomponents]}


def _error_details(r: CmdResult) -> tuple[str | None, str]:
    text = r.stderr or r.stdout
    code = _CODE_RE.search(text)
    msg = _MESSAGE_RE.search(text)
    return (code.group(1) if code else None), (msg.group(1).strip() if msg else text)


def parse_status_response(payload: dict[str, Any]) -> RebootStatusSample:
    # proto3 JSON drops fields at their zero value, so a missing "active" is false.
    count = payload.get("count")
    return RebootStatusSample(
        active=bool(payload.get("active", False)),
        reason=str(payload.get("reason", "")),
        count=int(count) if count is not None else None,
    )


class GnoiTransport:
    """gNOI System service calls through ``grpcurl``."""

    def __init__(self, endpoint: Endpoint, binary: str = "grpcurl", timeout: float = 60.0) -> None:
        self.endpoint = endpoint
        self.binary = binary
        self.timeout = timeout

    def _invoke(self, rpc: str, request: dict[str, Any]) -> CmdResult:
        argv = [self.binary, "-insecure" if self.endpoint.skip_verify else "-plaintext"]
        argv += ["-H", f"username: {self.endpoint.username}", "-H", f"password: {self.endpoint.password}"]
        argv += ["-max-time", str(int(self.timeout)), "-d", "@", self.endpoint.target, rpc]
        logger.debug("grpcurl %s %s", rpc, request)
        return run_cmd(argv, timeout=self.timeout + 5, stdin=json.dumps(request))

    def reboot(self, target: RebootTarget) -> dict[str, Any]:
        r = self._invoke(REBOOT_RPC, reboot_request(target))
        if r.rc == 0:
            try:
                return json.loads(r.stdout) if r.stdout else {}
            except json.JSONDecodeError:
                return {"raw": r.stdout}
        code, message = _error_details(r)
        if code == "Unimplemented":
            raise RpcUnimplementedError(f"Reboot: {message}")
        if code in _REJECT_CODES:
            raise RebootRejectedError(message, code=code)
        raise RemoteError(f"Reboot failed: {message}", code=code)

    def reboot_status(self, subcomponents: tuple[SubcomponentPath, ...] | None) -> RebootStatusSample:
        r = self._invoke(REBOOT_STATUS_RPC, reboot_status_request(subcomponents))
        if r.rc != 0:
            code, message = _error_details(r)
            if code == "Unimplemented":
                raise RpcUnimplementedError(f"RebootStatus: {message}")
            raise RemoteError(f"RebootStatus failed: {message}", code=code)
        try:
            payload = json.loads(r.stdout) if r.stdout else {}
        except json.JSONDecodeError as exc:
            raise RemoteError(f"undecodable RebootStatus response: {exc}") from exc
        return parse_status_response(payload)
