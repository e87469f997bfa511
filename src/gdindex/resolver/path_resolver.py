"""Path <-> id resolution for one configured drive root."""

from __future__ import annotations

from typing import MutableMapping, Optional, Sequence

from loguru import logger

from gdindex.controller import DriveController
from gdindex.controller.query import format_search_terms
from gdindex.models import DriveRoot, FileRecord, ListPage, PathLookup, RootType, SearchScope
from gdindex.util.paths import (
    decode_segment,
    encode_segment,
    normalize_dir_path,
    split_file_path,
    split_segments,
)

PERSONAL_ROOT_ALIAS: str = "root"


class PathResolver:
    """
    Resolve slash-paths under one DriveRoot to Drive ids, and back.

    Caches (process-local, never evicted):
        - directory path -> folder id, filled one segment at a time
        - file path -> FileRecord
        - directory path -> {page index -> ListPage}

    Known limitation: `resolve_id_to_path` follows only `parent_ids[0]`, so an
    item with several parents resolves to a single, arbitrary path.
    """

    def __init__(
        self,
        root: DriveRoot,
        controller: DriveController,
        *,
        order: int = 0,
        root_ids: Optional[Sequence[str]] = None,
        personal_roots: Optional[MutableMapping[str, str]] = None,
        list_page_size: int = 100,
        search_page_size: int = 100,
        search_all_drives: bool = True,
    ) -> None:
        self.root = root
        self.order = order
        self.root_type = RootType.SHARED_DRIVE
        self._controller = controller
        self._root_ids = list(root_ids) if root_ids is not None else [root.id]
        self._personal_roots = personal_roots if personal_roots is not None else {}
        self._list_page_size = list_page_size
        self._search_page_size = search_page_size
        self._search_all_drives = search_all_drives

        self._paths: dict[str, str] = {"/": root.id}
        self._files: dict[str, FileRecord] = {}
        self._pages: dict[str, dict[int, ListPage[FileRecord]]] = {}

    @property
    def url_path_prefix(self) -> str:
        return f"/{self.order}:"

    @property
    def personal_root_id(self) -> Optional[str]:
        return self._personal_roots.get(self._controller.credential.cache_key)

    @property
    def search_scope(self) -> SearchScope:
        if self._search_all_drives:
            return SearchScope.ALL_DRIVES
        if self.root_type is RootType.SHARED_DRIVE:
            return SearchScope.DRIVE
        return SearchScope.USER

    async def init(self) -> None:
        """
        Discover the account's personal root id (once per credential) and
        classify this resolver's root.
        """
        key = self._controller.credential.cache_key
        if key not in self._personal_roots:
            record = await self._controller.get_metadata(PERSONAL_ROOT_ALIAS)
            if record is not None and record.id:
                self._personal_roots[key] = record.id

        personal = self._personal_roots.get(key)
        if self.root.id == PERSONAL_ROOT_ALIAS or (personal and self.root.id == personal):
            self.root_type = RootType.USER_DRIVE
        else:
            self.root_type = RootType.SHARED_DRIVE
        logger.debug(f"root {self.order} classified as {self.root_type.name}")

    # ----------------------------
    # Path -> id
    # ----------------------------
    async def resolve_path_to_id(self, path: str) -> Optional[str]:
        """
        Walk from the root one segment at a time.

        Each segment is looked up as a folder under the previous segment's id;
        resolved prefixes are memoized. Returns None on the first missing
        segment.
        """
        key = normalize_dir_path(path)
        cached = self._paths.get(key)
        if cached is not None:
            return cached

        current_path = "/"
        current_id = self._paths[current_path]
        for segment in split_segments(key):
            current_path += segment + "/"
            known = self._paths.get(current_path)
            if known is None:
                record = await self._controller.find_child(
                    current_id,
                    decode_segment(segment),
                    folders_only=True,
                )
                if record is None or not record.id:
                    logger.debug(f"path segment not found: {current_path}")
                    return None
                known = record.id
                self._paths[current_path] = known
            current_id = known

        return current_id

    async def resolve_single_file(self, path: str) -> Optional[FileRecord]:
        """Resolve a file path; the last segment is matched by exact name."""
        folder, name = split_file_path(path)
        if not name:
            return None

        key = folder + name
        cached = self._files.get(key)
        if cached is not None:
            return cached

        parent_id = await self.resolve_path_to_id(folder)
        if parent_id is None:
            return None

        record = await self._controller.find_child(
            parent_id,
            decode_segment(name),
            folders_only=False,
        )
        if record is not None:
            self._files[key] = record
        return record

    # ----------------------------
    # Listing / search
    # ----------------------------
    async def list_directory(
        self,
        path: str,
        page_token: Optional[str] = None,
        page_index: int = 0,
    ) -> ListPage[FileRecord]:
        key = normalize_dir_path(path)
        cached = self._pages.get(key, {}).get(page_index)
        if cached is not None:
            logger.debug(f"listing cache hit: {key} page {page_index}")
            return cached

        folder_id = await self.resolve_path_to_id(key)
        if folder_id is None:
            return ListPage(files=[], next_page_token=None, page_index=page_index)

        page = await self.list_directory_by_id(folder_id, page_token, page_index)
        self._pages.setdefault(key, {})[page_index] = page
        return page

    async def list_directory_by_id(
        self,
        folder_id: str,
        page_token: Optional[str] = None,
        page_index: int = 0,
    ) -> ListPage[FileRecord]:
        files, next_token = await self._controller.list_children(
            folder_id,
            page_token=page_token,
            page_size=self._list_page_size,
        )
        return ListPage(files=files, next_page_token=next_token, page_index=page_index)

    async def search(
        self,
        keyword: str,
        page_token: Optional[str] = None,
        page_index: int = 0,
    ) -> ListPage[FileRecord]:
        terms = format_search_terms(keyword)
        if not terms:
            return ListPage(files=[], next_page_token=None, page_index=page_index)

        scope = self.search_scope
        files, next_token = await self._controller.search(
            terms,
            scope=scope,
            drive_id=self.root.id if scope is SearchScope.DRIVE else None,
            page_token=page_token,
            page_size=self._search_page_size,
        )
        return ListPage(files=files, next_page_token=next_token, page_index=page_index)

    async def get_by_id(self, file_id: str) -> Optional[FileRecord]:
        return await self._controller.get_metadata(file_id)

    # ----------------------------
    # Id -> path
    # ----------------------------
    async def resolve_id_to_path(self, file_id: str) -> Optional[PathLookup]:
        """
        Walk `parent_ids[0]` upward until a configured root (of any resolver)
        is reached. Returns None if the chain ends first.
        """
        record = await self._controller.get_metadata(file_id)
        if record is None:
            return None

        known_roots = self._known_root_ids()
        chain: list[FileRecord] = [record]
        seen: set[str] = {record.id}
        current = record
        root_index: Optional[int] = None

        while current.parent_ids:
            parent_id = current.parent_ids[0]
            if parent_id in known_roots:
                root_index = known_roots.index(parent_id)
                break
            if parent_id in seen:
                logger.warning(f"parent cycle detected while resolving {len(chain)} levels up")
                break

            parent = await self._controller.get_metadata(parent_id)
            if parent is None or not parent.id:
                break
            chain.append(parent)
            seen.add(parent.id)
            current = parent

        if root_index is None:
            return None

        path = "/" + "/".join(encode_segment(r.name) for r in reversed(chain))
        if record.is_folder:
            path += "/"
        return PathLookup(path=path, root_index=root_index)

    def _known_root_ids(self) -> list[str]:
        personal = self.personal_root_id
        return [
            personal if rid == PERSONAL_ROOT_ALIAS and personal else rid
            for rid in self._root_ids
        ]
