import unittest

from gdindex.crypto.cipher import AesCbcCipher
from gdindex.crypto.session import SessionCodec

KEY = b"3225f86e99e205347b4310e437253bfd"
IV = bytes(range(16))
NOW = 1_700_000_000_000


class TestSessionCodec(unittest.TestCase):
    def setUp(self) -> None:
        self.codec = SessionCodec(AesCbcCipher(KEY, IV), clock=lambda: NOW)

    def test_round_trip(self) -> None:
        token = self.codec.mint("alice", "s3cret", ttl_days=7)
        self.assertEqual(len(token.split("|")), 3)
        self.assertNotIn("s3cret", token)

        claims = self.codec.verify(token)
        self.assertIsNotNone(claims)
        assert claims is not None
        self.assertEqual(claims.username, "alice")
        self.assertEqual(claims.password, "s3cret")
        self.assertEqual(claims.expires_at_ms, NOW + 7 * 86_400_000)

    def test_password_not_in_repr(self) -> None:
        claims = self.codec.verify(self.codec.mint("alice", "s3cret", ttl_days=1))
        self.assertNotIn("s3cret", repr(claims))

    def test_expired_session_is_rejected(self) -> None:
        token = self.codec.mint("alice", "s3cret", ttl_days=1)
        later = SessionCodec(AesCbcCipher(KEY, IV), clock=lambda: NOW + 86_400_001)
        self.assertIsNone(later.verify(token))

    def test_malformed_sessions_are_rejected(self) -> None:
        token = self.codec.mint("alice", "s3cret", ttl_days=1)
        self.assertIsNone(self.codec.verify(None))
        self.assertIsNone(self.codec.verify(""))
        self.assertIsNone(self.codec.verify("null"))
        self.assertIsNone(self.codec.verify("a|b"))
        self.assertIsNone(self.codec.verify(token + "|extra"))
        self.assertIsNone(self.codec.verify("x|y|z"))


if __name__ == "__main__":
    unittest.main()
