from __future__ import annotations

import unittest

from sealkit.aead import (
    generate_key,
    generate_nonce,
    seal,
    seal_with_random_nonce,
    unseal,
    unseal_embedded,
)
from sealkit.constants import CIPHERS, CIPHER_CHACHA20_POLY1305, NONCE_SIZE, TAG_SIZE
from sealkit.errors import InvalidKeyError, InvalidNonceError, SealkitError


KEY = bytes(range(32))
NONCE = bytes(range(100, 112))
SECRET = b'{"auths": {"registry.example.com": {"auth": "dXNlcjpwYXNz"}}}'


class SealTests(unittest.TestCase):
    def test_roundtrip_all_ciphers(self):
        for cipher in CIPHERS:
            for plaintext in (b"", b"x", SECRET, bytes(4096)):
                blob = seal(plaintext, KEY, NONCE, cipher=cipher)
                self.assertEqual(len(blob), len(plaintext) + TAG_SIZE)
                self.assertEqual(unseal(blob, KEY, NONCE, cipher=cipher), plaintext)

    def test_aes_gcm_known_answer(self):
        # McGrew & Viega GCM test case 14: 256-bit zero key, zero IV, one zero block
        blob = seal(bytes(16), bytes(32), bytes(12))
        self.assertEqual(
            blob.hex(),
            "cea7403d4d606b6e074ec5d3baf39d18" "d0d1c8a799996bf0265b98b5d48ab919",
        )

    def test_ciphers_differ(self):
        self.assertNotEqual(seal(SECRET, KEY, NONCE), seal(SECRET, KEY, NONCE, cipher=CIPHER_CHACHA20_POLY1305))

    def test_every_bit_flip_detected(self):
        blob = seal(b"short secret", KEY, NONCE)
        for i in range(len(blob) * 8):
            tampered = bytearray(blob)
            tampered[i // 8] ^= 1 << (i % 8)
            self.assertIsNone(unseal(bytes(tampered), KEY, NONCE), f"bit {i} flip not detected")

    def test_wrong_key_or_nonce(self):
        blob = seal(SECRET, KEY, NONCE)
        other_key = bytes(31) + b"\x01"
        other_nonce = bytes(12)
        self.assertIsNone(unseal(blob, other_key, NONCE))
        self.assertIsNone(unseal(blob, KEY, other_nonce))
        self.assertIsNone(unseal(blob, KEY, NONCE, cipher=CIPHER_CHACHA20_POLY1305))

    def test_malformed_inputs_collapse_to_none(self):
        blob = seal(SECRET, KEY, NONCE)
        self.assertIsNone(unseal(b"", KEY, NONCE))
        self.assertIsNone(unseal(blob[: TAG_SIZE - 1], KEY, NONCE))
        self.assertIsNone(unseal(blob[:-1], KEY, NONCE))
        self.assertIsNone(unseal(blob, KEY[:16], NONCE))
        self.assertIsNone(unseal(blob, KEY, NONCE[:8]))
        self.assertIsNone(unseal(blob, KEY, NONCE, cipher="rot13"))

    def test_bad_key_rejected_on_seal(self):
        for bad in (b"", b"short", bytes(16), bytes(33)):
            with self.assertRaises(InvalidKeyError):
                seal(SECRET, bad, NONCE)
        self.assertTrue(issubclass(InvalidKeyError, SealkitError))
        self.assertTrue(issubclass(InvalidKeyError, ValueError))

    def test_bad_nonce_rejected_on_seal(self):
        for bad in (b"", bytes(8), bytes(16), bytes(24)):
            with self.assertRaises(InvalidNonceError):
                seal(SECRET, KEY, bad)

    def test_non_bytes_key_and_nonce_rejected(self):
        # an int must not be read as a zero-filled buffer of that length
        with self.assertRaises(InvalidKeyError):
            seal(SECRET, 32, NONCE)
        with self.assertRaises(InvalidKeyError):
            seal(SECRET, "0" * 32, NONCE)
        with self.assertRaises(InvalidNonceError):
            seal(SECRET, KEY, 12)
        with self.assertRaises(TypeError):
            seal(16, KEY, NONCE)
        blob = seal(SECRET, bytes(32), NONCE)
        self.assertIsNone(unseal(blob, 32, NONCE))
        self.assertIsNone(unseal(blob, bytes(32), 12))
        self.assertIsNone(unseal(32, bytes(32), NONCE))
        self.assertIsNone(unseal_embedded(44, KEY))

    def test_unknown_cipher(self):
        with self.assertRaises(ValueError):
            seal(SECRET, KEY, NONCE, cipher="rot13")

    def test_accepts_bytearray_and_memoryview(self):
        blob = seal(bytearray(SECRET), bytearray(KEY), memoryview(NONCE))
        self.assertEqual(unseal(memoryview(blob), KEY, NONCE), SECRET)


class EmbeddedNonceTests(unittest.TestCase):
    def test_roundtrip(self):
        key = generate_key()
        blob = seal_with_random_nonce(SECRET, key)
        self.assertEqual(len(blob), NONCE_SIZE + len(SECRET) + TAG_SIZE)
        self.assertEqual(unseal_embedded(blob, key), SECRET)

    def test_fresh_nonce_per_call(self):
        a = seal_with_random_nonce(SECRET, KEY)
        b = seal_with_random_nonce(SECRET, KEY)
        self.assertNotEqual(a[:NONCE_SIZE], b[:NONCE_SIZE])
        self.assertNotEqual(a, b)

    def test_embedded_matches_detached_layout(self):
        blob = seal_with_random_nonce(SECRET, KEY)
        nonce, rest = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
        self.assertEqual(unseal(rest, KEY, nonce), SECRET)

    def test_failures_collapse_to_none(self):
        blob = seal_with_random_nonce(SECRET, KEY)
        self.assertIsNone(unseal_embedded(blob, generate_key()))
        self.assertIsNone(unseal_embedded(blob[: NONCE_SIZE + TAG_SIZE - 1], KEY))
        tampered = bytearray(blob)
        tampered[0] ^= 0x80
        self.assertIsNone(unseal_embedded(bytes(tampered), KEY))

    def test_generators(self):
        self.assertEqual(len(generate_key()), 32)
        self.assertEqual(len(generate_nonce()), NONCE_SIZE)
        self.assertNotEqual(generate_key(), generate_key())


if __name__ == "__main__":
    unittest.main()
