"""Google Drive API controller (internal use only)."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Sequence
from urllib.parse import quote

import httpx
from loguru import logger

from gdindex.auth import CredentialRef, TokenManager
from gdindex.errors import (
    HttpErrorInfo,
    NetworkError,
    RemoteStoreError,
    map_http_error,
)
from gdindex.models import FileRecord, SearchScope
from gdindex.util.retry import RetryPolicy, run_with_retry

from .fields import DRIVE_API_BASE, FILE_FIELDS, LIST_FIELDS, LIST_ORDER_BY, LOOKUP_FIELDS
from .query import child_by_name_query, children_query, search_query


class DriveController:
    """
    Authenticated Drive v3 calls for one credential.

    Notes:
        - A 404 answer means "not found" and yields None / empty results.
        - Every other non-2xx answer is retried, then raised as a
          RemoteStoreError subclass.
        - `supports_all_drives` is applied to all requests consistently.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        tokens: TokenManager,
        credential: CredentialRef,
        *,
        retry: Optional[RetryPolicy] = None,
        supports_all_drives: bool = True,
        api_base: str = DRIVE_API_BASE,
    ) -> None:
        self._http = http
        self._tokens = tokens
        self._credential = credential
        self._retry = retry or RetryPolicy()
        self._supports_all_drives = supports_all_drives
        self._api_base = api_base.rstrip("/")

    @property
    def credential(self) -> CredentialRef:
        return self._credential

    # ----------------------------
    # Public API
    # ----------------------------
    async def get_metadata(self, file_id: str) -> Optional[FileRecord]:
        data = await self._get_json(
            self._file_url(file_id),
            {"fields": FILE_FIELDS, **self._common_get_params()},
            label="drive metadata",
        )
        if data is None:
            return None
        return FileRecord.from_api(data)

    async def find_child(
        self,
        parent_id: str,
        name: str,
        *,
        folders_only: bool,
    ) -> Optional[FileRecord]:
        """Return the first child of `parent_id` whose name is exactly `name`."""
        data = await self._get_json(
            f"{self._api_base}/files",
            {
                "q": child_by_name_query(parent_id, name, folders_only=folders_only),
                "fields": LOOKUP_FIELDS,
                "pageSize": "1",
                **self._common_list_params(),
            },
            label="drive lookup",
        )
        files = (data or {}).get("files") or []
        if not files:
            return None
        return FileRecord.from_api(files[0])

    async def list_children(
        self,
        parent_id: str,
        *,
        page_token: Optional[str] = None,
        page_size: int = 100,
    ) -> tuple[list[FileRecord], Optional[str]]:
        params: dict[str, str] = {
            "q": children_query(parent_id),
            "orderBy": LIST_ORDER_BY,
            "fields": LIST_FIELDS,
            "pageSize": str(page_size),
            **self._common_list_params(),
        }
        if page_token:
            params["pageToken"] = page_token
        return self._page(
            await self._get_json(f"{self._api_base}/files", params, label="drive list")
        )

    async def search(
        self,
        terms: Sequence[str],
        *,
        scope: SearchScope,
        drive_id: Optional[str] = None,
        page_token: Optional[str] = None,
        page_size: int = 100,
    ) -> tuple[list[FileRecord], Optional[str]]:
        """Name search; `terms` must already be sanitised words."""
        if not terms:
            return [], None

        params: dict[str, str] = {
            "q": search_query(terms),
            "orderBy": LIST_ORDER_BY,
            "fields": LIST_FIELDS,
            "pageSize": str(page_size),
            "corpora": scope.value,
            **self._common_list_params(),
        }
        if scope is SearchScope.DRIVE:
            if not drive_id:
                raise ValueError("drive_id is required for SearchScope.DRIVE")
            params["driveId"] = drive_id
        if page_token:
            params["pageToken"] = page_token
        return self._page(
            await self._get_json(f"{self._api_base}/files", params, label="drive search")
        )

    @asynccontextmanager
    async def open_media(
        self,
        file_id: str,
        *,
        range_header: Optional[str] = None,
    ) -> AsyncIterator[Optional[httpx.Response]]:
        """
        Stream an object's bytes (`alt=media`).

        Yields the streaming response, or None when the object is missing.
        Only opening the stream is retried.
        """
        url = self._file_url(file_id)
        params = {"alt": "media", **self._common_get_params()}

        async def _open() -> httpx.Response:
            headers = await self._tokens.authorization_header(self._credential)
            if range_header:
                headers["Range"] = range_header
            request = self._http.build_request("GET", url, params=params, headers=headers)
            try:
                resp = await self._http.send(request, stream=True)
            except httpx.TransportError as exc:
                raise NetworkError("Network error", cause=exc) from exc
            if resp.status_code == 404 or resp.is_success:
                return resp
            await resp.aread()
            await resp.aclose()
            raise map_http_error(_http_error_to_info(resp))

        resp = await run_with_retry(_open, self._retry, _should_retry, label="drive media")
        try:
            yield None if resp.status_code == 404 else resp
        finally:
            await resp.aclose()

    # ----------------------------
    # Internals
    # ----------------------------
    def _file_url(self, file_id: str) -> str:
        return f"{self._api_base}/files/{quote(file_id, safe='')}"

    def _common_get_params(self) -> dict[str, str]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": "true"}

    def _common_list_params(self) -> dict[str, str]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": "true", "includeItemsFromAllDrives": "true"}

    @staticmethod
    def _page(data: Optional[dict[str, Any]]) -> tuple[list[FileRecord], Optional[str]]:
        if data is None:
            return [], None
        files = [FileRecord.from_api(f) for f in data.get("files") or [] if isinstance(f, dict)]
        next_token = data.get("nextPageToken")
        return files, next_token if isinstance(next_token, str) and next_token else None

    async def _get_json(
        self,
        url: str,
        params: dict[str, str],
        *,
        label: str = "drive request",
    ) -> Optional[dict[str, Any]]:
        async def _attempt() -> Optional[dict[str, Any]]:
            headers = await self._tokens.authorization_header(self._credential)
            try:
                resp = await self._http.get(url, params=params, headers=headers)
            except httpx.TransportError as exc:
                raise NetworkError("Network error", cause=exc) from exc

            if resp.status_code == 404:
                logger.debug(f"{label}: not found")
                return None
            if not resp.is_success:
                raise map_http_error(_http_error_to_info(resp))
            try:
                body = resp.json()
            except ValueError as exc:
                raise map_http_error(
                    HttpErrorInfo(status_code=resp.status_code, reason="invalidJson"),
                    cause=exc,
                ) from exc
            return body if isinstance(body, dict) else {}

        return await run_with_retry(_attempt, self._retry, _should_retry, label=label)


def _should_retry(exc: Exception) -> bool:
    return isinstance(exc, RemoteStoreError)


def _http_error_to_info(resp: httpx.Response) -> HttpErrorInfo:
    reason: Optional[str] = resp.reason_phrase or None
    message = None
    details: dict[str, Any] = {}

    try:
        payload = resp.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        err = payload["error"]
        message = err.get("message") or None
        errors = err.get("errors") or []
        if errors and isinstance(errors, list) and isinstance(errors[0], dict):
            details["domain"] = errors[0].get("domain")
            if isinstance(errors[0].get("reason"), str):
                reason = errors[0]["reason"]

    return HttpErrorInfo(
        status_code=resp.status_code,
        reason=reason,
        message=message if isinstance(message, str) else None,
        details=details or None,
    )
