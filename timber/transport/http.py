import json
from typing import List, Optional

import httpx

from timber.config import settings
from timber.types import LogEntry


class HTTPSync:
    """Default delivery strategy: one POST per batch to the ingestion API."""

    def __init__(
        self,
        api_key: str,
        source_id: str,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.source_id = source_id
        self.endpoint = (endpoint or settings.TIMBER_ENDPOINT).rstrip("/")
        timeout = settings.TIMBER_TIMEOUT if timeout is None else timeout
        self._owns_client = client is None
        # Persistent HTTP client with HTTP/2 and sensible timeouts
        self._http = client or httpx.Client(
            http2=True,
            timeout=httpx.Timeout(timeout, connect=3.0),
        )

    @property
    def url(self) -> str:
        return f"{self.endpoint}/sources/{self.source_id}/frames"

    def __call__(self, logs: List[LogEntry]) -> List[LogEntry]:
        body = json.dumps([log.to_payload() for log in logs], separators=(",", ":"), default=str)
        r = self._http.post(
            self.url,
            content=body,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        r.raise_for_status()
        return logs

    def close(self) -> None:
        if self._owns_client:
            self._http.close()
