from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import (
    HTTP_TIMEOUT,
    REQUEST_HEADERS,
    RETRY_BACKOFF,
    RETRY_STATUSES,
    RETRY_TOTAL,
    ClientConfig,
)
from ..datamodels import Entry
from ..errors import DecodeError, TransportError
from .base import Gateway

logger = logging.getLogger("wallabag_tui")

# Seconds shaved off the token lifetime so a request never races the expiry.
TOKEN_EXPIRY_MARGIN = 30


class WallabagGateway(Gateway):
    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.wallabag_url
        self.session = session or self._create_session()
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        retries = Retry(
            total=RETRY_TOTAL,
            backoff_factor=RETRY_BACKOFF,
            status_forcelist=RETRY_STATUSES,
        )
        adapter = HTTPAdapter(max_retries=retries)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    # --- Authentication ---
    def _fetch_token(self) -> str:
        url = f"{self.base_url}/oauth/v2/token"
        payload = {
            "grant_type": "password",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "username": self.config.username,
            "password": self.config.password,
        }
        try:
            logger.debug("Requesting OAuth token from %s", url)
            resp = self.session.post(url, data=payload, timeout=HTTP_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Authentication failed: {e}") from e
        data = _json(resp)
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise DecodeError("Token response has no access_token")
        self._token = token
        self._token_expires_at = (
            time.monotonic() + int(data.get("expires_in", 3600)) - TOKEN_EXPIRY_MARGIN
        )
        return token

    def _auth_headers(self, force_refresh: bool = False) -> Dict[str, str]:
        if force_refresh or not self._token or time.monotonic() >= self._token_expires_at:
            self._fetch_token()
        return {"Authorization": f"Bearer {self._token}"}

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            logger.debug("%s %s", method, url)
            resp = self.session.request(
                method, url, headers=self._auth_headers(), timeout=HTTP_TIMEOUT, **kwargs
            )
            if resp.status_code == 401:
                logger.debug("Token rejected, refreshing once")
                resp = self.session.request(
                    method,
                    url,
                    headers=self._auth_headers(force_refresh=True),
                    timeout=HTTP_TIMEOUT,
                    **kwargs,
                )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {path} failed: {e}") from e
        return resp

    # --- Gateway operations ---
    def count(self) -> int:
        data = _json(self._request("GET", "/api/entries.json", params={"perPage": 1}))
        total = data.get("total") if isinstance(data, dict) else None
        if isinstance(total, bool) or not isinstance(total, int):
            raise DecodeError("Entries response has no total")
        logger.info("Found %d entries in wallabag", total)
        return total

    def fetch_page(
        self, per_page: int, page: int, sort_field: str, sort_order: str
    ) -> List[Entry]:
        params = {
            "perPage": per_page,
            "page": page,
            "sort": sort_field,
            "order": sort_order,
            "detail": "full",
        }
        data = _json(self._request("GET", "/api/entries.json", params=params))
        try:
            items = data["_embedded"]["items"]
        except (KeyError, TypeError) as e:
            raise DecodeError(f"Page {page} has no embedded items") from e
        return [Entry.from_api(item) for item in items]

    def update_status(
        self, entry_id: int, archived: bool, starred: bool, public: bool
    ) -> bytes:
        payload = {
            "archive": int(archived),
            "starred": int(starred),
            "public": int(public),
        }
        resp = self._request("PATCH", f"/api/entries/{entry_id}.json", data=payload)
        return resp.content

    def add_entry(self, url: str) -> Entry:
        resp = self._request("POST", "/api/entries.json", data={"url": url})
        return Entry.from_api(_json(resp))

    def delete_entry(self, entry_id: int) -> None:
        self._request("DELETE", f"/api/entries/{entry_id}.json")


def _json(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise DecodeError(f"Invalid JSON from {resp.url}: {e}") from e
