from __future__ import annotations

from typing import Any, Dict, Optional, Union

import httpx


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def get_chain_id(self) -> int:
        payload = {"jsonrpc": "2.0", "id": 1, "method": "eth_chainId", "params": []}
        data = self._post(payload)
        return int(data["result"], 16)

    def get_block_number(self) -> int:
        """Returns the latest block number."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": "eth_blockNumber", "params": []}
        data = self._post(payload)
        return int(data["result"], 16)

    def get_block_timestamp(self, block: Union[int, str] = "latest") -> int:
        """Returns the Unix timestamp of a block (number or tag)."""
        tag = hex(block) if isinstance(block, int) else block
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_getBlockByNumber",
            "params": [tag, False],
        }
        data = self._post(payload)
        result = data.get("result")
        if not result or "timestamp" not in result:
            raise RuntimeError(f"Block {block}: eth_getBlockByNumber returned no timestamp.")
        return int(result["timestamp"], 16)

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data
