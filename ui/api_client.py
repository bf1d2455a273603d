import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
import requests
from typing import Any, Dict, List, Optional


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, timeout: float = 120.0) -> None:
        self.base_url = base_url or os.environ.get("API_BASE", "http://localhost:8000")
        self.timeout = timeout

    def _post(self, path: str, json: Dict[str, Any] | None = None, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
        r = requests.post(f"{self.base_url}{path}", json=json, params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _get(self, path: str, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
        r = requests.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Curation
    def demo(self, batch_interval_ms: int | None = None, batch_gap_ms: int = 500, include_geo: bool = True) -> Dict[str, Any]:
        params: Dict[str, Any] = {"batch_gap_ms": int(batch_gap_ms), "include_geo": str(include_geo).lower()}
        if batch_interval_ms:
            params["batch_interval_ms"] = int(batch_interval_ms)
        return self._get("/demo", params=params)

    def simulate(self, blocks: List[Dict[str, Any]], cells: List[Dict[str, Any]], params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._post("/simulate", json={"blocks": blocks, "cells": cells, "params": params or {}})

    # Synthetic topology changes
    def quadrants(self, fog_nodes: int = 10, mobile_devices_per_fog_node: int = 10, moving_devices: int = 1,
                  runtime_ms: int = 120_000, interval_ms: int = 1000) -> Dict[str, Any]:
        body = {
            "fog_nodes": int(fog_nodes),
            "mobile_devices_per_fog_node": int(mobile_devices_per_fog_node),
            "moving_devices": int(moving_devices),
            "runtime_ms": int(runtime_ms),
            "interval_ms": int(interval_ms),
        }
        return self._post("/quadrants", json=body)
