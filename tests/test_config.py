import unittest

from gdindex.auth import RefreshTokenCredential, ServiceAccountCredential
from gdindex.config import IndexSettings
from gdindex.errors import ConfigError
from gdindex.models import DriveRoot

CRED = RefreshTokenCredential(client_id="cid", client_secret="cs", refresh_token="rt")
KEY = "k" * 32


def _settings(**kwargs) -> IndexSettings:
    kwargs.setdefault("roots", (DriveRoot(id="root", name="My Drive", auth_binding=CRED),))
    kwargs.setdefault("crypto_base_key", KEY)
    kwargs.setdefault("hmac_base_key", "mac-key")
    return IndexSettings(**kwargs)


class TestIndexSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        s = _settings()
        self.assertEqual(s.file_link_expiry_days, 7)
        self.assertEqual(s.login_days, 7)
        self.assertEqual(s.files_list_page_size, 100)
        self.assertFalse(s.enable_ip_lock)
        self.assertIsNone(s.encrypt_iv)
        self.assertEqual(s.root_ids, ["root"])

    def test_keys_hidden_from_repr(self) -> None:
        self.assertNotIn(KEY, repr(_settings()))

    def test_validation(self) -> None:
        with self.assertRaises(ConfigError):
            _settings(roots=())
        with self.assertRaises(ConfigError):
            _settings(crypto_base_key="short")
        with self.assertRaises(ConfigError):
            _settings(hmac_base_key="")
        with self.assertRaises(ConfigError):
            _settings(encrypt_iv=b"\x00" * 8)
        with self.assertRaises(ConfigError):
            _settings(file_link_expiry_days=0)
        with self.assertRaises(ConfigError):
            _settings(files_list_page_size=0)
        with self.assertRaises(ConfigError):
            _settings(search_result_list_page_size=5000)


class TestFromMapping(unittest.TestCase):
    def test_full_mapping(self) -> None:
        s = IndexSettings.from_mapping(
            {
                "crypto_base_key": KEY,
                "hmac_base_key": "mac-key",
                "encrypt_iv": list(range(16)),
                "download_path": "/dl",
                "retry": {"max_attempts": 5, "initial_delay_sec": 0},
                "auth": {
                    "client_id": "cid",
                    "client_secret": "cs",
                    "refresh_token": "rt",
                    "file_link_expiry": 2,
                    "enable_ip_lock": True,
                    "search_all_drives": False,
                    "users_list": [{"username": "alice", "password": "pw"}],
                    "roots": [
                        {"id": "root", "name": "My Drive", "protect_file_link": True},
                        {
                            "id": "TEAM",
                            "name": "Team",
                            "auth": {"service_account_json": {"client_email": "sa@x", "private_key": "PEM"}},
                        },
                    ],
                },
            }
        )

        self.assertEqual(s.encrypt_iv, bytes(range(16)))
        self.assertEqual(s.download_path, "/dl")
        self.assertEqual(s.retry.max_attempts, 5)
        self.assertEqual(s.file_link_expiry_days, 2)
        self.assertTrue(s.enable_ip_lock)
        self.assertFalse(s.search_all_drives)
        self.assertEqual(len(s.users_list), 1)

        self.assertEqual(s.root_ids, ["root", "TEAM"])
        self.assertTrue(s.roots[0].protect_link)
        self.assertEqual(s.roots[0].auth_binding, CRED)
        self.assertIsInstance(s.roots[1].auth_binding, ServiceAccountCredential)

    def test_hex_iv(self) -> None:
        s = IndexSettings.from_mapping(
            {
                "crypto_base_key": KEY,
                "hmac_base_key": "m",
                "encrypt_iv": "00" * 16,
                "auth": {"client_id": "c", "client_secret": "s", "refresh_token": "r", "roots": [{"id": "R", "name": "R"}]},
            }
        )
        self.assertEqual(s.encrypt_iv, b"\x00" * 16)

    def test_bad_inputs(self) -> None:
        base = {"crypto_base_key": KEY, "hmac_base_key": "m"}
        with self.assertRaises(ConfigError):
            IndexSettings.from_mapping({**base, "auth": "nope"})
        with self.assertRaises(ConfigError):
            IndexSettings.from_mapping({**base, "auth": {"client_id": "c", "roots": [{"id": "R", "name": "R"}]}})
        with self.assertRaises(ConfigError):
            IndexSettings.from_mapping(
                {
                    **base,
                    "encrypt_iv": "zz",
                    "auth": {"client_id": "c", "client_secret": "s", "refresh_token": "r", "roots": [{"id": "R", "name": "R"}]},
                }
            )


if __name__ == "__main__":
    unittest.main()
