"""Bounded wait for an in-flight gNOI reboot to finish.

The poller sleeps a fixed interval, checks the deadline, then asks the device
whether the reboot is still active::

    POLLING --active=true-----------> POLLING
    POLLING --active=false----------> COMPLETED
    POLLING --deadline passed-------> TIMED_OUT
    POLLING --RPC unimplemented-----> UNSUPPORTED_FATAL

Any other RPC error means the device is still busy rebooting and is retried
on the next tick. The interval is fixed; reboots take minutes, so backing off
would only delay detection.
"""

from __future__ import annotations

import logging

from rebootlab.core.errors import RemoteError, RpcUnimplementedError
from rebootlab.core.model import PollResult, PollState, RebootStatusSample, RebootTarget
from rebootlab.evidence.transport_base import DeviceClient
from rebootlab.utils.time import Clock, Deadline, SystemClock

logger = logging.getLogger(__name__)

POLL_INTERVAL = 10.0


class RebootStatusPoller:
    def __init__(self, client: DeviceClient, clock: Clock | None = None, interval: float = POLL_INTERVAL) -> None:
        self.client = client
        self.clock = clock or SystemClock()
        self.interval = interval

    def poll(self, target: RebootTarget, max_wait: float, degraded: bool = False) -> PollResult:
        """Block until the reboot of ``target`` is done or ``max_wait`` elapses.

        ``degraded`` sends the status query without subcomponents, for devices
        that only answer chassis-wide RebootStatus.
        """
        subcomponents = None if degraded else target.subcomponents
        deadline = Deadline(self.clock, max_wait)
        state = PollState.POLLING
        queries = 0
        last: RebootStatusSample | None = None

        while state == PollState.POLLING:
            logger.info("Waiting for %.0f seconds before checking.", self.interval)
            self.clock.sleep(self.interval)
            if deadline.expired():
                state = PollState.TIMED_OUT
                break

            queries += 1
            try:
                sample = self.client.reboot_status(subcomponents)
            except RpcUnimplementedError as exc:
                logger.error("Unimplemented RebootStatus() is not fully compliant with gNOI Reboot: %s", exc)
                state = PollState.UNSUPPORTED_FATAL
                break
            except RemoteError as exc:
                logger.debug("RebootStatus query %d failed, retrying: %s", queries, exc)
                continue

            last = sample
            if sample.unsupported:
                state = PollState.UNSUPPORTED_FATAL
            elif not sample.active:
                state = PollState.COMPLETED

        result = PollResult(state=state, queries=queries, elapsed=deadline.elapsed(), last_sample=last)
        logger.info("Reboot status polling for %s ended %s after %d queries (%.1fs)", target.names, state.value, queries, result.elapsed)
        return result
