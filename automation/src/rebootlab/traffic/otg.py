from __future__ import annotations

import logging

import requests

from rebootlab.core.errors import RemoteError

logger = logging.getLogger(__name__)


class OtgTrafficGenerator:
    """Open Traffic Generator REST control (``/control/state``)."""

    def __init__(self, base_url: str, flow_names: list[str] | None = None, verify: bool = False, timeout: float = 60) -> None:
        self.base_url = base_url.rstrip("/")
        self.flow_names = list(flow_names or [])
        self.verify = verify
        self.timeout = timeout
        self.session = requests.Session()

    def _set_state(self, body: dict) -> dict:
        url = f"{self.base_url}/control/state"
        try:
            r = self.session.post(url, json=body, verify=self.verify, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RemoteError(f"OTG request to {url} failed: {exc}") from exc
        if r.status_code >= 300:
            raise RemoteError(f"OTG {body['choice']} state change failed: HTTP {r.status_code} {r.text[:200]}")
        payload = r.json() if r.content else {}
        for warning in payload.get("warnings", []) or []:
            logger.warning("OTG: %s", warning)
        return payload

    def _protocols(self, state: str) -> None:
        logger.info("%s protocols", state.capitalize())
        self._set_state({"choice": "protocol", "protocol": {"choice": "all", "all": {"state": state}}})

    def _traffic(self, state: str) -> None:
        logger.info("%s traffic", state.capitalize())
        flow_transmit: dict = {"state": state}
        if self.flow_names:
            flow_transmit["flow_names"] = self.flow_names
        self._set_state({"choice": "traffic", "traffic": {"choice": "flow_transmit", "flow_transmit": flow_transmit}})

    def start_protocols(self) -> None:
        self._protocols("start")

    def stop_protocols(self) -> None:
        self._protocols("stop")

    def start_traffic(self) -> None:
        self._traffic("start")

    def stop_traffic(self) -> None:
        self._traffic("stop")
