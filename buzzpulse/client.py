"""
Signed HTTP client for the BuzzPulse API.

Mirrors what the mobile app does: register once, keep the device id and
secret, and sign every write with
``sha256(deviceId.ts.rawBody.secret)``. Useful for smoke tests, load
scripts and anything else that needs to talk to a running server.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from buzzpulse.core.auth import compute_signature
from buzzpulse.core.clock import Clock, SystemClock
from buzzpulse.services.devices import DeviceCredentials


class PulseClientError(Exception):
    def __init__(self, status_code: int, payload: Any):
        super().__init__(f"HTTP {status_code}: {payload}")
        self.status_code = status_code
        self.payload = payload


class PulseClient:
    def __init__(
        self,
        http: httpx.Client,
        credentials_path: Optional[Path] = None,
        clock: Optional[Clock] = None,
    ):
        self.http = http
        self.credentials_path = Path(credentials_path) if credentials_path else None
        self.clock = clock or SystemClock()
        self._credentials: Optional[DeviceCredentials] = None

    @classmethod
    def connect(cls, base_url: str, **kwargs) -> "PulseClient":
        return cls(httpx.Client(base_url=base_url, timeout=15), **kwargs)

    # ---------------------------
    # Credentials
    # ---------------------------

    def _load_credentials(self) -> Optional[DeviceCredentials]:
        if not self.credentials_path or not self.credentials_path.exists():
            return None
        data = json.loads(self.credentials_path.read_text(encoding="utf-8"))
        if not data.get("deviceId") or not data.get("secret"):
            return None
        return DeviceCredentials(device_id=data["deviceId"], secret=data["secret"])

    def _save_credentials(self, creds: DeviceCredentials) -> None:
        if not self.credentials_path:
            return
        self.credentials_path.parent.mkdir(parents=True, exist_ok=True)
        self.credentials_path.write_text(
            json.dumps({"deviceId": creds.device_id, "secret": creds.secret}),
            encoding="utf-8",
        )

    def ensure_device(self) -> DeviceCredentials:
        if self._credentials:
            return self._credentials

        creds = self._load_credentials()
        if creds is None:
            data = self._check(self.http.post("/device/register"))
            creds = DeviceCredentials(device_id=data["deviceId"], secret=data["secret"])
            self._save_credentials(creds)
            logger.info(f"[client] registered device {creds.device_id}")

        self._credentials = creds
        return creds

    # ---------------------------
    # Transport
    # ---------------------------

    @staticmethod
    def _check(resp: httpx.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            data = resp.text
        if resp.status_code >= 400:
            raise PulseClientError(resp.status_code, data)
        return data

    def _signed_headers(self, body: str) -> Dict[str, str]:
        creds = self.ensure_device()
        ts = str(self.clock.now())
        return {
            "x-device-id": creds.device_id,
            "x-timestamp": ts,
            "x-signature": compute_signature(creds.device_id, ts, body, creds.secret),
        }

    def signed_post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = json.dumps(body or {})
        headers = self._signed_headers(payload)
        headers["content-type"] = "application/json"
        return self._check(self.http.post(path, content=payload, headers=headers))

    def signed_get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._check(self.http.get(path, params=params, headers=self._signed_headers("")))

    # ---------------------------
    # API
    # ---------------------------

    def ingest(self, cell_id: str, ts: Optional[int] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"cellId": cell_id}
        if ts is not None:
            body["ts"] = ts
        return self.signed_post("/ingest", body)

    def vibe(self, cell_id: str, vibe: str) -> Dict[str, Any]:
        return self.signed_post("/vibe", {"cellId": cell_id, "vibe": vibe})

    def stats(self, cell_id: str) -> Dict[str, Any]:
        return self.signed_get("/stats", {"cellId": cell_id})

    def heat(self, bbox: tuple, min_count: int = 1, window: int = 30) -> list:
        west, south, east, north = bbox
        params = {
            "bbox": f"{west},{south},{east},{north}",
            "min": str(min_count),
            "window": str(window),
        }
        return self._check(self.http.get("/heat", params=params)).get("data", [])
