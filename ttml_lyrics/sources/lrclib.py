from __future__ import annotations

import logging
import time
from typing import List

import requests

from .types import LookupRecord

logger = logging.getLogger(__name__)

API_BASE = "https://lrclib.net/api"


class LrcLibSource:
    name = "lrclib"

    def __init__(self, *, max_retries: int, backoff_base_s: float, timeout_s: float = 10.0):
        self.max_retries = max_retries
        self.backoff_base_s = backoff_base_s
        self.timeout_s = timeout_s

    def _get_json(self, url: str, params: dict[str, str] | None = None):
        for attempt in range(1, self.max_retries + 1):
            try:
                r = requests.get(url, params=params, headers={"accept": "application/json"}, timeout=self.timeout_s)
                if r.status_code == 404:
                    return None
                r.raise_for_status()
                return r.json()
            except requests.RequestException as e:
                logger.warning("lrclib error (attempt %s/%s): %s", attempt, self.max_retries, e)
                if attempt == self.max_retries:
                    return None
                time.sleep(self.backoff_base_s * attempt)
        return None

    def search(self, *, track_name: str, artist_name: str | None = None) -> List[LookupRecord]:
        """
        Search lrclib by track name (required) and optional artist.
        """
        if not track_name or not track_name.strip():
            raise ValueError("'track_name' must be provided")

        params = {"track_name": track_name.strip()}
        if artist_name and artist_name.strip():
            params["artist_name"] = artist_name.strip()

        data = self._get_json(f"{API_BASE}/search", params)
        if not isinstance(data, list):
            return []
        return [LookupRecord.from_api(item) for item in data if isinstance(item, dict)]

    def get(self, record_id: int) -> LookupRecord | None:
        data = self._get_json(f"{API_BASE}/get/{record_id}")
        if not isinstance(data, dict):
            return None
        return LookupRecord.from_api(data)
