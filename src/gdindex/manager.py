"""DriveIndex: the boundary facade. No raw Drive id leaves this module."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import timedelta
from typing import AsyncIterator, Optional
from urllib.parse import quote

import httpx
from loguru import logger

from gdindex.auth import UserStore
from gdindex.config import IndexSettings
from gdindex.context import IndexContext
from gdindex.crypto import DownloadCapability, SessionClaims
from gdindex.errors import InvalidStateError
from gdindex.models import FileRecord, ListPage, PathLookup, PublicFileRecord
from gdindex.resolver import PathResolver
from gdindex.util.mime import is_google_app

# Upstream headers passed through to the browser on downloads.
_PASSTHROUGH_HEADERS: tuple[str, ...] = (
    "content-type",
    "content-length",
    "content-range",
    "accept-ranges",
    "etag",
    "last-modified",
)


@dataclass(slots=True)
class DownloadStream:
    """An open upstream download, ready to be relayed to the client."""

    name: str
    mime_type: str
    status_code: int
    headers: dict[str, str]
    body: AsyncIterator[bytes] = field(repr=False)


class DriveIndex:
    """High-level API consumed by the web layer."""

    def __init__(
        self,
        settings: IndexSettings,
        *,
        http: Optional[httpx.AsyncClient] = None,
        user_store: Optional[UserStore] = None,
    ) -> None:
        self._ctx = IndexContext(settings, http=http, user_store=user_store)

    @classmethod
    def from_context(cls, context: IndexContext) -> "DriveIndex":
        """Create an index around an existing context (useful for tests)."""
        obj = cls.__new__(cls)
        obj._ctx = context
        return obj

    @property
    def context(self) -> IndexContext:
        return self._ctx

    @property
    def settings(self) -> IndexSettings:
        return self._ctx.settings

    async def open(self) -> None:
        await self._ctx.open()

    async def aclose(self) -> None:
        await self._ctx.aclose()

    async def __aenter__(self) -> "DriveIndex":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ----------------------------
    # Listing / lookup
    # ----------------------------
    async def list_directory(
        self,
        root_index: int,
        path: str,
        *,
        page_token: Optional[str] = None,
        page_index: int = 0,
        requester_ip: Optional[str] = None,
    ) -> ListPage[PublicFileRecord]:
        page = await self._resolver(root_index).list_directory(path, page_token, page_index)
        return self._publish_page(page, requester_ip)

    async def list_by_wrapped_id(
        self,
        root_index: int,
        wrapped_id: str,
        *,
        page_token: Optional[str] = None,
        page_index: int = 0,
        requester_ip: Optional[str] = None,
    ) -> Optional[ListPage[PublicFileRecord]]:
        """Fallback listing of a folder addressed by its outbound (encrypted) id."""
        folder_id = self._ctx.links.unwrap_id(wrapped_id)
        if folder_id is None:
            return None
        page = await self._resolver(root_index).list_directory_by_id(
            folder_id, page_token, page_index
        )
        return self._publish_page(page, requester_ip)

    async def resolve_single_file(
        self,
        root_index: int,
        path: str,
        *,
        requester_ip: Optional[str] = None,
    ) -> Optional[PublicFileRecord]:
        record = await self._resolver(root_index).resolve_single_file(path)
        if record is None:
            return None
        return self._publish(record, requester_ip)

    async def resolve_path_to_id(self, root_index: int, path: str) -> Optional[str]:
        """Return the encrypted id of the folder at `path`, or None."""
        folder_id = await self._resolver(root_index).resolve_path_to_id(path)
        if folder_id is None:
            return None
        return self._ctx.links.wrap_id(folder_id)

    async def get_by_wrapped_id(
        self,
        root_index: int,
        wrapped_id: str,
        *,
        requester_ip: Optional[str] = None,
    ) -> Optional[PublicFileRecord]:
        file_id = self._ctx.links.unwrap_id(wrapped_id)
        if file_id is None:
            return None
        record = await self._resolver(root_index).get_by_id(file_id)
        if record is None:
            return None
        return self._publish(record, requester_ip)

    async def resolve_id_to_path(self, root_index: int, wrapped_id: str) -> Optional[PathLookup]:
        file_id = self._ctx.links.unwrap_id(wrapped_id)
        if file_id is None:
            return None
        return await self._resolver(root_index).resolve_id_to_path(file_id)

    async def find_path(self, root_index: int, wrapped_id: str) -> Optional[str]:
        """Friendly route ('/<root>:<path>') for an encrypted id, or None."""
        lookup = await self.resolve_id_to_path(root_index, wrapped_id)
        return lookup.route if lookup is not None else None

    async def search(
        self,
        root_index: int,
        keyword: str,
        *,
        page_token: Optional[str] = None,
        page_index: int = 0,
        requester_ip: Optional[str] = None,
    ) -> ListPage[PublicFileRecord]:
        page = await self._resolver(root_index).search(keyword, page_token, page_index)
        return self._publish_page(page, requester_ip)

    # ----------------------------
    # Sessions
    # ----------------------------
    def mint_session(
        self,
        username: str,
        password: str,
        ttl_days: Optional[float] = None,
    ) -> str:
        days = ttl_days if ttl_days is not None else self.settings.login_days
        return self._ctx.sessions.mint(username, password, days)

    async def verify_session(self, token: Optional[str]) -> Optional[SessionClaims]:
        """Decode the cookie, then re-check the credentials against the user store."""
        claims = self._ctx.sessions.verify(token)
        if claims is None:
            return None
        if not await self._ctx.user_store.verify(claims.username, claims.password):
            logger.warning("session rejected: credentials no longer valid")
            return None
        return claims

    # ----------------------------
    # Downloads
    # ----------------------------
    def mint_link(self, record: FileRecord, *, requester_ip: Optional[str] = None) -> str:
        ttl = timedelta(days=self.settings.file_link_expiry_days)
        bound_ip = requester_ip if self.settings.enable_ip_lock and requester_ip else None
        capability = self._ctx.links.mint(record.id, ttl, bound_ip=bound_ip)
        return capability.to_url(self.settings.download_path)

    @asynccontextmanager
    async def open_download(
        self,
        file: Optional[str],
        expiry: Optional[str],
        mac: Optional[str],
        ip: Optional[str] = None,
        *,
        requester_ip: Optional[str] = None,
        range_header: Optional[str] = None,
        inline: bool = False,
        root_index: int = 0,
    ) -> AsyncIterator[Optional[DownloadStream]]:
        """
        Verify capability query parameters and open the object's byte stream.

        Yields None for an invalid or expired capability, a missing object, or
        an item without binary content (folders, Google-apps types); callers
        answer all of them with the same generic response.
        """
        claims = self._ctx.links.verify_params(
            file, expiry, mac, ip, requester_ip=requester_ip
        )
        if claims is None:
            yield None
            return

        resolver = self._resolver(root_index)
        record = await resolver.get_by_id(claims.file_id)
        if record is None or is_google_app(record.mime_type):
            yield None
            return

        async with self._stream(resolver, record, range_header, inline) as stream:
            yield stream

    @asynccontextmanager
    async def open_path_download(
        self,
        root_index: int,
        path: str,
        *,
        range_header: Optional[str] = None,
        inline: bool = False,
    ) -> AsyncIterator[Optional[DownloadStream]]:
        resolver = self._resolver(root_index)
        record = await resolver.resolve_single_file(path)
        if record is None or is_google_app(record.mime_type):
            yield None
            return

        async with self._stream(resolver, record, range_header, inline) as stream:
            yield stream

    def verify_capability(
        self,
        capability: DownloadCapability,
        *,
        requester_ip: Optional[str] = None,
    ) -> bool:
        return self._ctx.links.verify(capability, requester_ip=requester_ip) is not None

    # ----------------------------
    # Internals
    # ----------------------------
    def _resolver(self, root_index: int) -> PathResolver:
        if not self._ctx.opened:
            raise InvalidStateError("DriveIndex.open() must be awaited first")
        return self._ctx.resolver(root_index)

    def _publish(self, record: FileRecord, requester_ip: Optional[str]) -> PublicFileRecord:
        links = self._ctx.links
        return PublicFileRecord(
            id=links.wrap_id(record.id),
            drive_id=links.wrap_id(record.drive_id) if record.drive_id else "",
            name=record.name,
            mime_type=record.mime_type,
            size=record.size,
            created_at=record.created_at,
            modified_at=record.modified_at,
            file_extension=record.file_extension,
            link=None if record.is_folder else self.mint_link(record, requester_ip=requester_ip),
        )

    def _publish_page(
        self,
        page: ListPage[FileRecord],
        requester_ip: Optional[str],
    ) -> ListPage[PublicFileRecord]:
        return ListPage(
            files=[self._publish(r, requester_ip) for r in page.files],
            next_page_token=page.next_page_token,
            page_index=page.page_index,
        )

    @asynccontextmanager
    async def _stream(
        self,
        resolver: PathResolver,
        record: FileRecord,
        range_header: Optional[str],
        inline: bool,
    ) -> AsyncIterator[Optional[DownloadStream]]:
        controller = self._ctx.controller_for(resolver.root.auth_binding)
        async with controller.open_media(record.id, range_header=range_header) as resp:
            if resp is None:
                yield None
                return

            headers = {
                name: resp.headers[name]
                for name in _PASSTHROUGH_HEADERS
                if name in resp.headers
            }
            if "content-length" not in headers and record.size is not None and resp.status_code == 200:
                headers["content-length"] = str(record.size)
            headers["content-disposition"] = _content_disposition(record.name, inline)

            yield DownloadStream(
                name=record.name,
                mime_type=record.mime_type,
                status_code=resp.status_code,
                headers=headers,
                body=resp.aiter_bytes(),
            )


def _content_disposition(name: str, inline: bool) -> str:
    if inline:
        return "inline"
    fallback = name.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(name, safe='')}"
