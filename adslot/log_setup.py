from __future__ import annotations

import logging

from adslot.models import AdEnvironment

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(environment: AdEnvironment = AdEnvironment.production) -> None:
    """Configure root logging for a host process.

    Development gets DEBUG so slot transitions are visible; production stays at INFO.
    """

    level = logging.DEBUG if environment is AdEnvironment.development else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("adslot").setLevel(level)
