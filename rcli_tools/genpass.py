import logging
import secrets

log =logging.getLogger(__name__)

# Look-alike glyphs (I, O, l, 0) are left out.
UPPER = b"ABCDEFGHJKLMNPQRSTUVWXYZ"
LOWER = b"abcdefghijkmnopqrstuvwxyz"
NUMBER = b"123456789"
SYMBOL = b"!@#$%^&*_"


def generate_password(length: int, uppercase: bool = True, lowercase: bool = True,
                      number: bool = True, symbol: bool = True, *, rng=None) -> bytes:
    """Generate `length` bytes of password material.

    One character of every enabled class is placed first so each class is
    guaranteed to appear, the rest is drawn from the combined pool and the
    result is shuffled. `rng` is any random.Random-like object; defaults to
    secrets.SystemRandom().
    """
    if rng is None:
        rng = secrets.SystemRandom()

    password = []
    chars = b""
    for enabled, alphabet in ((uppercase, UPPER), (lowercase, LOWER), (number, NUMBER), (symbol, SYMBOL)):
        if enabled:
            chars += alphabet
            password.append(rng.choice(alphabet))

    if not chars:
        raise ValueError("At least one character class must be enabled")
    if length < len(password):
        raise ValueError(f"length must be at least {len(password)} for the enabled character classes")

    for _ in range(length - len(password)):
        password.append(rng.choice(chars))

    rng.shuffle(password)
    log.debug("Generated %d-byte password from a %d-character pool", length, len(chars))
    return bytes(password)


def enabled_classes(uppercase: bool, lowercase: bool, number: bool, symbol: bool) -> int:
    return sum(1 for flag in (uppercase, lowercase, number, symbol) if flag)


def process_genpass(length: int = 16, uppercase: bool = True, lowercase: bool = True,
                    number: bool = True, symbol: bool = True, rng=None) -> str:
    return generate_password(length, uppercase, lowercase, number, symbol, rng=rng).decode("ascii")
