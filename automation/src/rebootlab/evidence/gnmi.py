from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from rebootlab.adapters.base import run_cmd
from rebootlab.testbed.schema import Endpoint

logger = logging.getLogger(__name__)

_NAME_KEY_RE = re.compile(r"\[name=([^\]]+)\]")


@dataclass(slots=True)
class GnmiResponse:
    ok: bool
    payload: Any
    error: str | None = None


@dataclass(slots=True)
class GnmiUpdate:
    path: str
    value: Any

    @property
    def key_name(self) -> str | None:
        """The ``name`` key of the innermost keyed element, if any."""
        keys = _NAME_KEY_RE.findall(self.path)
        return keys[-1] if keys else None

    @property
    def leaf(self) -> str:
        return strip_module(self.path.rstrip("/").rsplit("/", 1)[-1])


def strip_module(value: Any) -> Any:
    """Drop yang module prefixes: ``openconfig-platform-types:LINECARD`` -> ``LINECARD``."""
    if isinstance(value, str) and ":" in value and not value.startswith("/"):
        return value.rsplit(":", 1)[-1]
    return value


def normalize_container(value: dict[str, Any]) -> dict[str, Any]:
    return {strip_module(k): v for k, v in value.items()}


def flatten_updates(payload: Any) -> list[GnmiUpdate]:
    """Flatten ``gnmic get --format json`` output into (path, value) pairs."""
    notifications = payload if isinstance(payload, list) else [payload]
    out: list[GnmiUpdate] = []
    for notif in notifications:
        if not isinstance(notif, dict):
            continue
        for upd in notif.get("updates") or []:
            path = str(upd.get("Path", ""))
            for key, value in (upd.get("values") or {}).items():
                full = path if path else str(key)
                out.append(GnmiUpdate(path=full, value=value))
    return out


class GnmiTransport:
    """gNMI Get over the ``gnmic`` CLI."""

    def __init__(self, endpoint: Endpoint, binary: str = "gnmic", timeout: float = 30.0) -> None:
        self.endpoint = endpoint
        self.binary = binary
        self.timeout = timeout

    def _argv(self, path: str) -> list[str]:
        argv = [
            self.binary,
            "-a",
            self.endpoint.target,
            "-u",
            self.endpoint.username,
            "-p",
            self.endpoint.password,
            "--encoding",
            "json_ietf",
            "--format",
            "json",
        ]
        if self.endpoint.skip_verify:
            argv.append("--skip-verify")
        return argv + ["get", "--path", path]

    def get(self, path: str) -> GnmiResponse:
        r = run_cmd(self._argv(path), timeout=self.timeout)
        if r.rc != 0:
            return GnmiResponse(ok=False, payload=None, error=r.stderr or f"gnmic exited {r.rc}")
        try:
            payload = json.loads(r.stdout) if r.stdout else []
        except json.JSONDecodeError as exc:
            return GnmiResponse(ok=False, payload=None, error=f"undecodable gnmic output: {exc}")
        return GnmiResponse(ok=True, payload=payload)

    def get_updates(self, path: str) -> tuple[list[GnmiUpdate], str | None]:
        res = self.get(path)
        if not res.ok:
            logger.debug("gNMI get %s failed: %s", path, res.error)
            return [], res.error
        return flatten_updates(res.payload), None
