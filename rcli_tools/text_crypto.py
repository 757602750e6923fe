"""Text signing, verification and authenticated encryption.

Engines are built per operation from raw key bytes and keep nothing but the
validated key. Signers and verifiers read their whole input before computing.
"""
import enum
import hmac
import logging
import os
from typing import BinaryIO, Callable, Dict, Optional

import blake3
from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from .errors import AuthenticationFailure, InvalidKeyLength, InvalidNonceLength, MalformedSignature
from .genpass import generate_password

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16
ED25519_SIGNATURE_SIZE = 64

BLAKE3_KEY_FILE = "blake3.txt"
ED25519_SECRET_KEY_FILE = "ed25519.sk"
ED25519_PUBLIC_KEY_FILE = "ed25519.pk"
NONCE_FILE = "chacha20.nonce"

SECRET_FILES = (BLAKE3_KEY_FILE, ED25519_SECRET_KEY_FILE)

log = logging.getLogger(__name__)

RandomBytes = Callable[[int], bytes]


class SignFormat(enum.Enum):
    BLAKE3 = "blake3"
    ED25519 = "ed25519"

    @classmethod
    def parse(cls, value: str) -> "SignFormat":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid format: {value!r} (expected blake3 or ed25519)") from None

    def __str__(self) -> str:
        return self.value


def _check_key(key: bytes) -> bytes:
    key = bytes(key)
    if len(key) != KEY_SIZE:
        raise InvalidKeyLength(f"key length must be {KEY_SIZE} bytes, got {len(key)}")
    return key


def _check_nonce(nonce: bytes) -> bytes:
    nonce = bytes(nonce)
    if len(nonce) != NONCE_SIZE:
        raise InvalidNonceLength(f"nonce length must be {NONCE_SIZE} bytes, got {len(nonce)}")
    return nonce


# --- Engines ---

class TextSigner:
    def sign(self, reader: BinaryIO) -> bytes:
        raise NotImplementedError


class TextVerifier:
    def verify(self, reader: BinaryIO, sig: bytes) -> bool:
        raise NotImplementedError


class Blake3(TextSigner, TextVerifier):
    """Keyed BLAKE3; the same shared key signs and verifies."""

    def __init__(self, key: bytes):
        self._key = _check_key(key)

    @classmethod
    def try_new(cls, key: bytes) -> "Blake3":
        return cls(key)

    def _tag(self, data: bytes) -> bytes:
        return blake3.blake3(data, key=self._key).digest()

    def sign(self, reader: BinaryIO) -> bytes:
        return self._tag(reader.read())

    def verify(self, reader: BinaryIO, sig: bytes) -> bool:
        return hmac.compare_digest(self._tag(reader.read()), bytes(sig))

    @staticmethod
    def generate(rng=None) -> Dict[str, bytes]:
        key = generate_password(KEY_SIZE, True, True, True, True, rng=rng)
        return {BLAKE3_KEY_FILE: key}


class Ed25519Signer(TextSigner):
    def __init__(self, seed: bytes):
        self._key = Ed25519PrivateKey.from_private_bytes(_check_key(seed))

    @classmethod
    def try_new(cls, seed: bytes) -> "Ed25519Signer":
        return cls(seed)

    def sign(self, reader: BinaryIO) -> bytes:
        return self._key.sign(reader.read())

    @property
    def public_key_bytes(self) -> bytes:
        return self._key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @staticmethod
    def generate(random_bytes: RandomBytes = os.urandom) -> Dict[str, bytes]:
        seed = random_bytes(KEY_SIZE)
        signer = Ed25519Signer(seed)
        return {
            ED25519_SECRET_KEY_FILE: seed,
            ED25519_PUBLIC_KEY_FILE: signer.public_key_bytes,
        }


class Ed25519Verifier(TextVerifier):
    def __init__(self, public_key: bytes):
        self._key = Ed25519PublicKey.from_public_bytes(_check_key(public_key))

    @classmethod
    def try_new(cls, public_key: bytes) -> "Ed25519Verifier":
        return cls(public_key)

    def verify(self, reader: BinaryIO, sig: bytes) -> bool:
        data = reader.read()
        if len(sig) < ED25519_SIGNATURE_SIZE:
            raise MalformedSignature(
                f"ed25519 signature must be {ED25519_SIGNATURE_SIZE} bytes, got {len(sig)}"
            )
        try:
            self._key.verify(bytes(sig[:ED25519_SIGNATURE_SIZE]), data)
        except InvalidSignature:
            return False
        return True


class ChaCha20:
    """ChaCha20-Poly1305 over an in-memory buffer, no associated data."""

    def __init__(self, key: bytes):
        self._cipher = ChaCha20Poly1305(_check_key(key))

    @classmethod
    def try_new(cls, key: bytes) -> "ChaCha20":
        return cls(key)

    def encrypt(self, plaintext: bytes, nonce: bytes) -> bytes:
        return self._cipher.encrypt(_check_nonce(nonce), bytes(plaintext), None)

    def decrypt(self, ciphertext: bytes, nonce: bytes) -> bytes:
        nonce = _check_nonce(nonce)
        try:
            return self._cipher.decrypt(nonce, bytes(ciphertext), None)
        except InvalidTag:
            raise AuthenticationFailure("decryption failed") from None


def generate_nonce(random_bytes: RandomBytes = os.urandom) -> bytes:
    return random_bytes(NONCE_SIZE)


# --- Dispatch ---

def make_signer(fmt: SignFormat, key: bytes) -> TextSigner:
    if fmt is SignFormat.BLAKE3:
        return Blake3.try_new(key)
    if fmt is SignFormat.ED25519:
        return Ed25519Signer.try_new(key)
    raise ValueError(f"Unsupported format: {fmt}")


def make_verifier(fmt: SignFormat, key: bytes) -> TextVerifier:
    if fmt is SignFormat.BLAKE3:
        return Blake3.try_new(key)
    if fmt is SignFormat.ED25519:
        return Ed25519Verifier.try_new(key)
    raise ValueError(f"Unsupported format: {fmt}")


def process_text_sign(reader: BinaryIO, key: bytes, fmt: SignFormat) -> bytes:
    signer = make_signer(fmt, key)
    log.debug("Signing with %s", fmt)
    return signer.sign(reader)


def process_text_verify(reader: BinaryIO, key: bytes, sig: bytes, fmt: SignFormat) -> bool:
    verifier = make_verifier(fmt, key)
    log.debug("Verifying %d-byte %s signature", len(sig), fmt)
    return verifier.verify(reader, sig)


def process_text_key_generate(fmt: SignFormat, *, rng=None,
                              random_bytes: RandomBytes = os.urandom) -> Dict[str, bytes]:
    if fmt is SignFormat.BLAKE3:
        return Blake3.generate(rng=rng)
    if fmt is SignFormat.ED25519:
        return Ed25519Signer.generate(random_bytes)
    raise ValueError(f"Unsupported format: {fmt}")


def process_nonce_generate(random_bytes: RandomBytes = os.urandom) -> Dict[str, bytes]:
    return {NONCE_FILE: generate_nonce(random_bytes)}


def process_text_encrypt(plaintext: bytes, key: bytes, nonce: bytes) -> bytes:
    return ChaCha20.try_new(key).encrypt(plaintext, nonce)


def process_text_decrypt(ciphertext: bytes, key: bytes, nonce: bytes) -> bytes:
    return ChaCha20.try_new(key).decrypt(ciphertext, nonce)


def seal(plaintext: bytes, key: bytes, nonce: Optional[bytes] = None,
         random_bytes: RandomBytes = os.urandom) -> bytes:
    """Encrypt and prepend the nonce: [12-byte nonce][ciphertext][16-byte tag].

    A fresh nonce is drawn unless one is given.
    """
    cipher = ChaCha20.try_new(key)
    if nonce is None:
        nonce = generate_nonce(random_bytes)
    nonce = _check_nonce(nonce)
    log.debug("Encrypting %d bytes", len(plaintext))
    return nonce + cipher.encrypt(plaintext, nonce)


def open_sealed(blob: bytes, key: bytes) -> bytes:
    cipher = ChaCha20.try_new(key)
    if len(blob) < NONCE_SIZE + TAG_SIZE:
        raise AuthenticationFailure("decryption failed")
    nonce, ciphertext = bytes(blob[:NONCE_SIZE]), bytes(blob[NONCE_SIZE:])
    return cipher.decrypt(ciphertext, nonce)
