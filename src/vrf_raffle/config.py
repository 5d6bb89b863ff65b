from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_NETWORK = "hardhat"


@dataclass(frozen=True)
class Settings:
    network: str
    rpc_url: Optional[str] = None

    @staticmethod
    def from_env(
        network_override: str | None = None,
        rpc_url_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        # CLI flags win over the environment.
        network = network_override or os.getenv("RAFFLE_NETWORK", "").strip()
        rpc_url = rpc_url_override or os.getenv("RPC_URL", "").strip()

        return Settings(
            network=network or DEFAULT_NETWORK,
            rpc_url=rpc_url or None,
        )
