"""AES-CBC encryption of short strings."""

from __future__ import annotations

import base64
import os
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from gdindex.errors import ConfigError

_BLOCK_BITS = 128
_IV_LEN = 16


class AesCbcCipher:
    """
    Encrypt and decrypt UTF-8 strings with AES-CBC and PKCS7 padding.

    Two IV modes:
        - fixed IV (``iv`` given): output is base64(ciphertext). Equal
          plaintexts give equal ciphertexts; kept for links issued with it.
        - random IV (``iv`` is None): output is base64(iv || ciphertext).

    Decryption failures raise ValueError; codecs turn them into None.
    """

    def __init__(self, key: bytes, iv: Optional[bytes] = None) -> None:
        if len(key) not in (16, 24, 32):
            raise ConfigError("AES key must be 16, 24 or 32 bytes")
        if iv is not None and len(iv) != _IV_LEN:
            raise ConfigError("AES-CBC IV must be 16 bytes")
        self._key = key
        self._iv = iv

    def encrypt(self, plaintext: str) -> str:
        iv = self._iv if self._iv is not None else os.urandom(_IV_LEN)

        padder = padding.PKCS7(_BLOCK_BITS).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        body = encryptor.update(padded) + encryptor.finalize()

        raw = body if self._iv is not None else iv + body
        return base64.b64encode(raw).decode("ascii")

    def decrypt(self, token: str) -> str:
        raw = base64.b64decode(token.encode("ascii"), validate=True)

        if self._iv is not None:
            iv, body = self._iv, raw
        else:
            iv, body = raw[:_IV_LEN], raw[_IV_LEN:]
        if not body or len(body) % (_BLOCK_BITS // 8) != 0:
            raise ValueError("ciphertext length is not a positive multiple of the block size")

        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()

        unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()
        return data.decode("utf-8")
