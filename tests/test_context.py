import unittest

import httpx

from gdindex.auth import RefreshTokenCredential
from gdindex.config import IndexSettings
from gdindex.context import IndexContext
from gdindex.errors import ConfigError, TokenExchangeError
from gdindex.models import DriveRoot, RootType
from gdindex.util.mime import FOLDER_MIME
from gdindex.util.retry import RetryPolicy

NO_WAIT = RetryPolicy(max_attempts=3, initial_delay_sec=0)
CRED = RefreshTokenCredential(client_id="cid", client_secret="cs", refresh_token="rt")


def _settings() -> IndexSettings:
    return IndexSettings(
        roots=(
            DriveRoot(id="root", name="My Drive", auth_binding=CRED),
            DriveRoot(id="TEAM", name="Team", auth_binding=CRED),
        ),
        crypto_base_key="k" * 32,
        hmac_base_key="mac-key",
        retry=NO_WAIT,
    )


class TestIndexContext(unittest.IsolatedAsyncioTestCase):
    def _context(self, handler) -> tuple[IndexContext, httpx.AsyncClient]:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        self.addAsyncCleanup(http.aclose)
        return IndexContext(_settings(), http=http), http

    async def test_open_classifies_roots(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            if request.url.host == "oauth2.googleapis.com":
                return httpx.Response(200, json={"access_token": "AT", "expires_in": 3600})
            return httpx.Response(200, json={"id": "ROOTID", "name": "My Drive", "mimeType": FOLDER_MIME})

        ctx, http = self._context(handler)
        await ctx.open()
        await ctx.open()

        self.assertTrue(ctx.opened)
        self.assertEqual(ctx.resolver(0).root_type, RootType.USER_DRIVE)
        self.assertEqual(ctx.resolver(1).root_type, RootType.SHARED_DRIVE)
        self.assertEqual(ctx.personal_roots, {CRED.cache_key: "ROOTID"})
        # one token exchange and one personal-root lookup for the shared credential
        self.assertEqual(seen, ["/token", "/drive/v3/files/root"])

        await ctx.aclose()
        self.assertFalse(ctx.opened)
        self.assertFalse(http.is_closed)

    async def test_open_wraps_token_failure(self) -> None:
        ctx, _ = self._context(lambda r: httpx.Response(400, json={"error": "invalid_grant"}))

        with self.assertRaises(TokenExchangeError) as cm:
            await ctx.open()
        self.assertEqual(str(cm.exception), "Drive initialization failed")
        self.assertEqual(cm.exception.details["status_code"], 400)
        self.assertIsInstance(cm.exception.cause, TokenExchangeError)
        self.assertFalse(ctx.opened)

    def test_controllers_are_shared_per_credential(self) -> None:
        ctx = IndexContext(_settings(), http=httpx.AsyncClient())
        self.assertIs(ctx.controller_for(CRED), ctx.controller_for(CRED))
        self.assertEqual(len(ctx.resolvers), 2)
        with self.assertRaises(ConfigError):
            ctx.resolver(2)
        with self.assertRaises(ConfigError):
            ctx.resolver(-1)


if __name__ == "__main__":
    unittest.main()
