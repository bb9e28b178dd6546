class AuthenticationError(Exception):
    """Raised when the Wolfram Alpha AppID is missing or rejected."""


class IntegrationError(Exception):
    """Raised when a call to the Wolfram Alpha API fails."""


class RateLimitError(Exception):
    """Raised when the Wolfram Alpha rate limit is hit."""


class DecodeError(Exception):
    """Raised when a response document cannot be decoded into a Result."""


class MalformedDocument(DecodeError):
    """Raised when a response document is not well-formed XML."""


class FieldCoercionFailure(ValueError):
    """Raised inside the decoder when an attribute or element has the wrong type.

    Never escapes ``decode``: the affected field falls back to its zero value.
    """

    def __init__(self, field: str, value: str):
        super().__init__(f"cannot coerce {field}={value!r}")
        self.field = field
        self.value = value


class PrimaryTextError(Exception):
    """Raised when a Result has no primary plaintext to offer."""


class NoPrimaryPod(PrimaryTextError):
    """Raised when no pod in a Result is marked primary."""


class NoSubpods(PrimaryTextError):
    """Raised when the primary pod of a Result has no subpods."""
