import hashlib
import hmac
import unittest

from gdindex.crypto.integrity import canonical, compute_mac, verify_mac


class TestIntegrity(unittest.TestCase):
    def test_compute_mac_is_hex_hmac_sha256(self) -> None:
        expected = hmac.new(b"k", b"a|1", hashlib.sha256).hexdigest()
        self.assertEqual(compute_mac("a|1", "k"), expected)
        self.assertEqual(len(compute_mac("a|1", "k")), 64)

    def test_verify_mac(self) -> None:
        mac = compute_mac("F1|123", "secret")
        self.assertTrue(verify_mac("F1|123", mac, "secret"))
        self.assertFalse(verify_mac("F1|123", mac.upper(), "secret"))
        self.assertFalse(verify_mac("F1|123", mac[:-1] + "é", "secret"))
        self.assertFalse(verify_mac("F1|124", mac, "secret"))
        self.assertFalse(verify_mac("F1|123", mac, "other"))
        self.assertFalse(verify_mac("F1|123", None, "secret"))  # type: ignore[arg-type]

    def test_canonical_joins_with_pipe(self) -> None:
        self.assertEqual(canonical("F1", 123), "F1|123")
        self.assertEqual(canonical("F1", 123, "1.2.3.4"), "F1|123|1.2.3.4")


if __name__ == "__main__":
    unittest.main()
