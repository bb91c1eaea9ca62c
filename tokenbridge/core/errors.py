"""Error taxonomy for key management, token verification, and issuance."""


class TokenBridgeError(Exception):
    """Base class for all tokenbridge failures."""


class FetchError(TokenBridgeError):
    """Network or parse failure talking to the identity provider."""


class StoreError(TokenBridgeError):
    """The durable key store is unavailable or rejected an operation."""


class IssuanceError(TokenBridgeError):
    """The downstream token could not be minted."""


class TokenInvalid(TokenBridgeError):
    """An id-token failed verification.

    ``reason`` is a short machine-readable code for operators; callers facing
    end users should not echo it.
    """

    def __init__(self, reason: str, message: str = "") -> None:
        super().__init__(message or reason)
        self.reason = reason
