"""
Reusable pieces behind the rcli command line.

High-level API:
- process_text_sign(reader, key, fmt) -> signature bytes
- process_text_verify(reader, key, sig, fmt) -> bool
- process_text_key_generate(fmt) -> {file name: key bytes}
- process_nonce_generate() -> {file name: nonce bytes}
- seal(plaintext, key, nonce=None) -> nonce + ciphertext
- open_sealed(blob, key) -> plaintext
- generate_password(length, uppercase, lowercase, number, symbol) -> bytes
- process_encode(reader, fmt) / process_decode(reader, fmt) -> str
- process_csv(input_path, output_path, output_format) -> output_path

Exceptions are raised on errors instead of printing.
"""

from .errors import (
    RcliError,
    InvalidKeyLength,
    InvalidNonceLength,
    MalformedSignature,
    AuthenticationFailure,
    DecodeError,
)
from .text_crypto import (
    SignFormat,
    Blake3,
    Ed25519Signer,
    Ed25519Verifier,
    ChaCha20,
    make_signer,
    make_verifier,
    generate_nonce,
    process_text_sign,
    process_text_verify,
    process_text_key_generate,
    process_nonce_generate,
    process_text_encrypt,
    process_text_decrypt,
    seal,
    open_sealed,
    KEY_SIZE,
    NONCE_SIZE,
    SECRET_FILES,
)
from .genpass import generate_password, process_genpass
from .b64 import Base64Format, process_encode, process_decode, urlsafe_encode, urlsafe_decode
from .csv_convert import OutputFormat, process_csv
from .io_utils import get_content, write_key_bundle

__all__ = [
    "RcliError",
    "InvalidKeyLength",
    "InvalidNonceLength",
    "MalformedSignature",
    "AuthenticationFailure",
    "DecodeError",
    "SignFormat",
    "Blake3",
    "Ed25519Signer",
    "Ed25519Verifier",
    "ChaCha20",
    "make_signer",
    "make_verifier",
    "generate_nonce",
    "process_text_sign",
    "process_text_verify",
    "process_text_key_generate",
    "process_nonce_generate",
    "process_text_encrypt",
    "process_text_decrypt",
    "seal",
    "open_sealed",
    "KEY_SIZE",
    "NONCE_SIZE",
    "SECRET_FILES",
    "generate_password",
    "process_genpass",
    "Base64Format",
    "process_encode",
    "process_decode",
    "urlsafe_encode",
    "urlsafe_decode",
    "OutputFormat",
    "process_csv",
    "get_content",
    "write_key_bundle",
]
