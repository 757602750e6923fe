class RcliError(Exception):
    pass


class InvalidKeyLength(RcliError, ValueError):
    pass


class InvalidNonceLength(RcliError, ValueError):
    pass


class MalformedSignature(RcliError, ValueError):
    pass


class AuthenticationFailure(RcliError, ValueError):
    """Raised for any AEAD failure; the message never says which part was wrong."""


class DecodeError(RcliError, ValueError):
    pass
