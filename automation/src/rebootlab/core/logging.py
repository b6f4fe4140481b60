from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT, force=True)
    # urllib3 is chatty at DEBUG once the traffic generator is in use.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
