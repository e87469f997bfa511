"""Process-wide state: HTTP client, token store, caches and codecs."""

from __future__ import annotations

from typing import Optional

import httpx
from loguru import logger

from gdindex.auth import CredentialRef, StaticUserStore, TokenManager, TokenStore, UserStore
from gdindex.config import IndexSettings
from gdindex.controller import DriveController
from gdindex.crypto import AesCbcCipher, CapabilityLinkCodec, SessionCodec
from gdindex.errors import ConfigError, TokenExchangeError
from gdindex.resolver import PathResolver

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


class IndexContext:
    """
    Built once per process and shared by reference.

    Owns the token store, the personal-root map and one PathResolver per
    configured root. `open()` warms tokens and classifies roots;
    `aclose()` releases the HTTP client if the context created it.
    """

    def __init__(
        self,
        settings: IndexSettings,
        *,
        http: Optional[httpx.AsyncClient] = None,
        token_store: Optional[TokenStore] = None,
        user_store: Optional[UserStore] = None,
    ) -> None:
        self.settings = settings
        self._owns_http = http is None
        self.http = http if http is not None else httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        self.token_store = token_store if token_store is not None else TokenStore()
        self.user_store: UserStore = (
            user_store if user_store is not None else StaticUserStore(settings.users_list)
        )

        self.tokens = TokenManager(
            self.http,
            store=self.token_store,
            retry=settings.retry,
            safety_margin_sec=settings.token_safety_margin_sec,
        )

        cipher = AesCbcCipher(settings.crypto_base_key.encode("utf-8"), settings.encrypt_iv)
        self.links = CapabilityLinkCodec(cipher, settings.hmac_base_key)
        self.sessions = SessionCodec(cipher)

        self.personal_roots: dict[str, str] = {}
        self._controllers: dict[str, DriveController] = {}
        self.resolvers: list[PathResolver] = [
            PathResolver(
                root,
                self.controller_for(root.auth_binding),
                order=index,
                root_ids=settings.root_ids,
                personal_roots=self.personal_roots,
                list_page_size=settings.files_list_page_size,
                search_page_size=settings.search_result_list_page_size,
                search_all_drives=settings.search_all_drives,
            )
            for index, root in enumerate(settings.roots)
        ]
        self._opened = False

    @property
    def opened(self) -> bool:
        return self._opened

    def controller_for(self, credential: CredentialRef) -> DriveController:
        """One controller per distinct credential."""
        key = credential.cache_key
        controller = self._controllers.get(key)
        if controller is None:
            controller = DriveController(
                self.http,
                self.tokens,
                credential,
                retry=self.settings.retry,
            )
            self._controllers[key] = controller
        return controller

    def resolver(self, root_index: int) -> PathResolver:
        if not 0 <= root_index < len(self.resolvers):
            raise ConfigError(
                "Unknown drive root index",
                details={"root_index": root_index, "roots": len(self.resolvers)},
            )
        return self.resolvers[root_index]

    async def open(self) -> None:
        if self._opened:
            return
        try:
            for resolver in self.resolvers:
                await self.tokens.get_token(resolver.root.auth_binding)
                await resolver.init()
        except TokenExchangeError as exc:
            raise TokenExchangeError(
                "Drive initialization failed",
                details=exc.details,
                cause=exc,
            ) from exc
        self._opened = True
        logger.info(f"Index context opened with {len(self.resolvers)} root(s)")

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()
        self._opened = False

    async def __aenter__(self) -> "IndexContext":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
