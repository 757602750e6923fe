import io
import os
import random

import pytest

from rcli_tools import (
    AuthenticationFailure,
    Blake3,
    ChaCha20,
    Ed25519Signer,
    Ed25519Verifier,
    InvalidKeyLength,
    InvalidNonceLength,
    MalformedSignature,
    SignFormat,
    generate_nonce,
    open_sealed,
    process_nonce_generate,
    process_text_decrypt,
    process_text_encrypt,
    process_text_key_generate,
    process_text_sign,
    process_text_verify,
    seal,
)
from rcli_tools.genpass import LOWER, NUMBER, SYMBOL, UPPER

KEY = b"iCfTwZ7jtMV*@FXZzEE&KCB#SXn7eGCE"
OTHER_KEY = b"Zq8#mNp2!XrT5&vW9*yB3@cD6^fH4$jK"
NONCE = bytes([249, 115, 113, 158, 149, 52, 117, 46, 246, 119, 228, 36])
MESSAGE = b"hello world"


def _reader(data=MESSAGE):
    return io.BytesIO(data)


def _ed25519_keys():
    bundle = process_text_key_generate(SignFormat.ED25519)
    return bundle["ed25519.sk"], bundle["ed25519.pk"]


def test_sign_format_parse():
    assert SignFormat.parse("blake3") is SignFormat.BLAKE3
    assert SignFormat.parse("ed25519") is SignFormat.ED25519
    assert str(SignFormat.ED25519) == "ed25519"
    with pytest.raises(ValueError):
        SignFormat.parse("rsa")


def test_blake3_sign_verify():
    sig = process_text_sign(_reader(), KEY, SignFormat.BLAKE3)
    assert len(sig) == 32
    assert process_text_verify(_reader(), KEY, sig, SignFormat.BLAKE3) is True


def test_blake3_sign_is_deterministic():
    assert Blake3(KEY).sign(_reader()) == Blake3(KEY).sign(_reader())


def test_blake3_wrong_key_or_message_fails():
    sig = process_text_sign(_reader(), KEY, SignFormat.BLAKE3)
    assert process_text_verify(_reader(), OTHER_KEY, sig, SignFormat.BLAKE3) is False
    assert process_text_verify(_reader(b"hello world!"), KEY, sig, SignFormat.BLAKE3) is False


def test_blake3_verify_bad_signature_length_is_false():
    sig = process_text_sign(_reader(), KEY, SignFormat.BLAKE3)
    assert Blake3(KEY).verify(_reader(), sig[:16]) is False
    assert Blake3(KEY).verify(_reader(), sig + b"\x00") is False
    assert Blake3(KEY).verify(_reader(), b"") is False


def test_ed25519_sign_verify():
    sk, pk = _ed25519_keys()
    sig = process_text_sign(_reader(), sk, SignFormat.ED25519)
    assert len(sig) == 64
    assert process_text_verify(_reader(), pk, sig, SignFormat.ED25519) is True


def test_ed25519_wrong_key_fails():
    sk, _ = _ed25519_keys()
    _, other_pk = _ed25519_keys()
    sig = process_text_sign(_reader(), sk, SignFormat.ED25519)
    assert process_text_verify(_reader(), other_pk, sig, SignFormat.ED25519) is False


def test_ed25519_tampered_signature_fails():
    sk, pk = _ed25519_keys()
    sig = bytearray(Ed25519Signer(sk).sign(_reader()))
    sig[0] ^= 0x01
    assert Ed25519Verifier(pk).verify(_reader(), bytes(sig)) is False


def test_ed25519_trailing_signature_bytes_ignored():
    sk, pk = _ed25519_keys()
    sig = Ed25519Signer(sk).sign(_reader())
    assert Ed25519Verifier(pk).verify(_reader(), sig + b"trailing") is True


def test_ed25519_short_signature_is_malformed():
    sk, pk = _ed25519_keys()
    sig = Ed25519Signer(sk).sign(_reader())
    with pytest.raises(MalformedSignature):
        Ed25519Verifier(pk).verify(_reader(), sig[:63])


def test_ed25519_generate_uses_given_random_source():
    seed = bytes(range(32))
    bundle = process_text_key_generate(SignFormat.ED25519, random_bytes=lambda n: seed[:n])
    assert bundle["ed25519.sk"] == seed
    assert bundle["ed25519.pk"] == Ed25519Signer(seed).public_key_bytes
    assert bundle["ed25519.pk"] != seed


def test_blake3_generate_key():
    bundle = process_text_key_generate(SignFormat.BLAKE3, rng=random.Random(7))
    assert list(bundle) == ["blake3.txt"]
    key = bundle["blake3.txt"]
    assert len(key) == 32
    for alphabet in (UPPER, LOWER, NUMBER, SYMBOL):
        assert any(c in alphabet for c in key)
    sig = Blake3(key).sign(_reader())
    assert Blake3(key).verify(_reader(), sig)


@pytest.mark.parametrize("size", [0, 16, 31, 33, 64])
@pytest.mark.parametrize("engine", [Blake3, Ed25519Signer, Ed25519Verifier, ChaCha20])
def test_invalid_key_length(engine, size):
    with pytest.raises(InvalidKeyLength):
        engine.try_new(b"k" * size)


@pytest.mark.parametrize("fmt", list(SignFormat))
def test_dispatch_rejects_short_key(fmt):
    with pytest.raises(InvalidKeyLength):
        process_text_sign(_reader(), KEY[:31], fmt)
    with pytest.raises(InvalidKeyLength):
        process_text_verify(_reader(), KEY[:31], b"\x00" * 64, fmt)


def test_encrypt_decrypt_fixed_nonce():
    ciphertext = process_text_encrypt(MESSAGE, KEY, NONCE)
    assert len(ciphertext) == len(MESSAGE) + 16
    assert process_text_decrypt(ciphertext, KEY, NONCE) == MESSAGE


def test_encrypt_empty_plaintext():
    ciphertext = ChaCha20(KEY).encrypt(b"", NONCE)
    assert len(ciphertext) == 16
    assert ChaCha20(KEY).decrypt(ciphertext, NONCE) == b""


def test_every_bit_flip_fails_authentication():
    ciphertext = process_text_encrypt(MESSAGE, KEY, NONCE)
    for i in range(len(ciphertext) * 8):
        tampered = bytearray(ciphertext)
        tampered[i // 8] ^= 1 << (i % 8)
        with pytest.raises(AuthenticationFailure):
            process_text_decrypt(bytes(tampered), KEY, NONCE)


def test_decrypt_wrong_key_or_nonce_fails():
    ciphertext = process_text_encrypt(MESSAGE, KEY, NONCE)
    with pytest.raises(AuthenticationFailure) as wrong_key:
        process_text_decrypt(ciphertext, OTHER_KEY, NONCE)
    with pytest.raises(AuthenticationFailure) as wrong_nonce:
        process_text_decrypt(ciphertext, KEY, bytes(12))
    assert str(wrong_key.value) == str(wrong_nonce.value)


def test_nonce_length_checked():
    with pytest.raises(InvalidNonceLength):
        ChaCha20(KEY).encrypt(MESSAGE, NONCE[:8])
    with pytest.raises(InvalidNonceLength):
        ChaCha20(KEY).decrypt(b"\x00" * 32, NONCE + b"\x00")


def test_generate_nonce():
    assert len(generate_nonce()) == 12
    assert generate_nonce(lambda n: b"\x01" * n) == b"\x01" * 12
    assert process_nonce_generate(lambda n: b"\x02" * n) == {"chacha20.nonce": b"\x02" * 12}


def test_seal_uses_fresh_nonce():
    first = seal(MESSAGE, KEY)
    second = seal(MESSAGE, KEY)
    assert first[:12] != second[:12]
    assert first != second
    assert len(first) == 12 + len(MESSAGE) + 16
    assert open_sealed(first, KEY) == MESSAGE
    assert open_sealed(second, KEY) == MESSAGE


def test_seal_with_given_nonce():
    blob = seal(MESSAGE, KEY, NONCE)
    assert blob[:12] == NONCE
    assert blob[12:] == process_text_encrypt(MESSAGE, KEY, NONCE)


def test_open_sealed_rejects_short_or_tampered_blob():
    with pytest.raises(AuthenticationFailure):
        open_sealed(os.urandom(27), KEY)
    blob = bytearray(seal(MESSAGE, KEY))
    blob[3] ^= 0x80
    with pytest.raises(AuthenticationFailure):
        open_sealed(bytes(blob), KEY)
