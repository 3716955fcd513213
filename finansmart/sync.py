"""
sync.py - push/pull of the whole ledger to a spreadsheet script endpoint

The remote side is a single user-supplied URL (typically a Google Apps
Script web app bound to a spreadsheet):
  - POST with a JSON array of transactions saves the sheet. The response is
    not inspected: such endpoints answer with a redirect/opaque page, so the
    push is best-effort and counts as done once the request went out.
  - GET returns the JSON array currently stored in the sheet.

There is no retry, authentication or partial sync. A pull replaces the local
ledger wholesale, so callers must confirm it with the user first.
"""

from enum import Enum
from typing import Any, Callable, List, Optional, Sequence
import logging

import requests

from finansmart.models import Transaction

logger = logging.getLogger(__name__)

LOAD_PROMPT = "This will replace your local data with the sheet contents. Continue?"


class SyncError(Exception):
    """Base class for every sync failure surfaced to the UI."""


class SyncConfigurationError(SyncError):
    """No endpoint configured."""


class SyncTransportError(SyncError):
    """The request could not be sent or no response arrived."""


class SyncResponseError(SyncTransportError):
    """The endpoint answered, but not with a usable ledger."""


class SheetSyncClient:
    """
    Thin requests-based client. A custom session can be passed in (tests use
    a fake one). timeout defaults to None, so a silent endpoint blocks the
    call indefinitely.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.session = session or requests.Session()
        self.timeout = timeout

    @staticmethod
    def _check_endpoint(endpoint: str) -> str:
        endpoint = (endpoint or "").strip()
        if not endpoint:
            raise SyncConfigurationError("Sheet URL is not configured")
        return endpoint

    def push(self, endpoint: str, records: Sequence[Transaction]) -> bool:
        """
        Send the full collection. Returns True once the request was dispatched;
        raises SyncTransportError only for transport-level failures.
        """
        endpoint = self._check_endpoint(endpoint)
        payload = [t.to_dict() if isinstance(t, Transaction) else t for t in records]
        logger.info("Pushing %d records to sheet endpoint", len(payload))
        try:
            self.session.post(
                endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.exception("Sync push failed")
            raise SyncTransportError(f"Could not reach the sheet endpoint ({exc.__class__.__name__})") from exc
        return True

    def pull(self, endpoint: str) -> List[Any]:
        """
        Fetch the full collection. The parsed array is returned as-is (no
        schema validation); Ledger.replace_all does the tolerant conversion.
        """
        endpoint = self._check_endpoint(endpoint)
        logger.info("Pulling ledger from sheet endpoint")
        try:
            response = self.session.get(endpoint, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.exception("Sync pull failed")
            raise SyncTransportError(f"Could not reach the sheet endpoint ({exc.__class__.__name__})") from exc

        if not response.ok:
            logger.warning("Sheet endpoint answered with status %s", response.status_code)
            raise SyncResponseError(f"Failed to load data (HTTP {response.status_code})")
        try:
            data = response.json()
        except ValueError as exc:
            raise SyncResponseError("Sheet endpoint did not return JSON") from exc
        if not isinstance(data, list):
            raise SyncResponseError("Sheet endpoint did not return a list of records")
        logger.info("Pulled %d records from sheet endpoint", len(data))
        return data


class SyncStatus(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


class SyncSession:
    """
    UI-facing wrapper around the client: tracks the last sync status and
    applies pulled data to the ledger. It does not serialize concurrent
    calls; the dashboard disables its buttons while is_syncing is set.
    """

    def __init__(self, ledger, client: Optional[SheetSyncClient] = None):
        self.ledger = ledger
        self.client = client or SheetSyncClient()
        self.status = SyncStatus.IDLE
        self.last_error: Optional[SyncError] = None

    @property
    def is_syncing(self) -> bool:
        return self.status == SyncStatus.SYNCING

    def _fail(self, exc: SyncError) -> bool:
        self.status = SyncStatus.ERROR
        self.last_error = exc
        return False

    def save_to_sheet(self) -> bool:
        """Push the ledger to its configured endpoint."""
        self.status = SyncStatus.SYNCING
        self.last_error = None
        try:
            self.client.push(self.ledger.sheet_url, self.ledger.snapshot())
        except SyncError as exc:
            return self._fail(exc)
        self.status = SyncStatus.SUCCESS
        return True

    def load_from_sheet(self, confirm: Callable[[str], bool]) -> bool:
        """
        Replace the local ledger with the sheet contents once confirm() agrees.
        On any failure the local ledger is left untouched.
        """
        if not (self.ledger.sheet_url or "").strip():
            return self._fail(SyncConfigurationError("Sheet URL is not configured"))
        if not confirm(LOAD_PROMPT):
            logger.info("Load from sheet cancelled")
            return False
        self.status = SyncStatus.SYNCING
        self.last_error = None
        try:
            data = self.client.pull(self.ledger.sheet_url)
        except SyncError as exc:
            return self._fail(exc)
        self.ledger.replace_all(data)
        self.status = SyncStatus.SUCCESS
        return True
