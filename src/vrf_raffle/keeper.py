from __future__ import annotations

import logging
from typing import Optional

from .errors import UpkeepNotNeeded
from .raffle import Raffle

log = logging.getLogger(__name__)


class Keeper:
    """Off-chain trigger: polls the upkeep predicate and fires the draw."""

    def __init__(self, raffle: Raffle, address: str) -> None:
        self.raffle = raffle
        self.address = address

    def poll(self) -> Optional[int]:
        upkeep_needed, perform_data = self.raffle.check_upkeep(b"")
        if not upkeep_needed:
            log.debug("Upkeep not needed for %s", self.raffle.address)
            return None

        try:
            return self.raffle.perform_upkeep(sender=self.address, perform_data=perform_data)
        except UpkeepNotNeeded as e:
            # Another caller drew between our check and our trigger.
            log.info("Draw skipped: %s", e)
            return None
