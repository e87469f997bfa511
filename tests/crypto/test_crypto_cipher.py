import base64
import unittest

from gdindex.crypto.cipher import AesCbcCipher
from gdindex.errors import ConfigError

KEY = b"3225f86e99e205347b4310e437253bfd"
IV = bytes(range(16))


class TestAesCbcCipher(unittest.TestCase):
    def test_fixed_iv_is_deterministic_and_round_trips(self) -> None:
        cipher = AesCbcCipher(KEY, IV)
        a = cipher.encrypt("1AbCdEfGhIjK")
        b = cipher.encrypt("1AbCdEfGhIjK")
        self.assertEqual(a, b)
        self.assertEqual(cipher.decrypt(a), "1AbCdEfGhIjK")
        # bare ciphertext: one padded block, no IV prefix
        self.assertEqual(len(base64.b64decode(a)), 16)

    def test_random_iv_differs_per_call_and_round_trips(self) -> None:
        cipher = AesCbcCipher(KEY)
        a = cipher.encrypt("same")
        b = cipher.encrypt("same")
        self.assertNotEqual(a, b)
        self.assertEqual(cipher.decrypt(a), "same")
        self.assertEqual(cipher.decrypt(b), "same")
        self.assertEqual(len(base64.b64decode(a)), 32)

    def test_unicode_plaintext(self) -> None:
        cipher = AesCbcCipher(KEY, IV)
        self.assertEqual(cipher.decrypt(cipher.encrypt("日本語 ファイル")), "日本語 ファイル")

    def test_decrypt_rejects_invalid_base64(self) -> None:
        cipher = AesCbcCipher(KEY, IV)
        with self.assertRaises(ValueError):
            cipher.decrypt("not base64!!")

    def test_decrypt_rejects_partial_block(self) -> None:
        cipher = AesCbcCipher(KEY, IV)
        with self.assertRaises(ValueError):
            cipher.decrypt(base64.b64encode(b"short").decode("ascii"))

    def test_bad_key_or_iv_length(self) -> None:
        with self.assertRaises(ConfigError):
            AesCbcCipher(b"short")
        with self.assertRaises(ConfigError):
            AesCbcCipher(KEY, b"123")


if __name__ == "__main__":
    unittest.main()
