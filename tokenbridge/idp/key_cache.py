"""Process-local cache of IdP signing keys."""

from collections.abc import Iterable

from tokenbridge.crypto.types import SigningKey


class KeyCache:
    """In-memory ``kid -> SigningKey`` mapping.

    Populated in bulk from whole key sets. ``load_all`` builds a fresh dict and
    swaps it in with one assignment, so readers never observe a half-loaded
    set and need no lock. There is no expiry; the refresh job and cold starts
    from the key store keep the contents current.
    """

    def __init__(self) -> None:
        self._keys: dict[str, SigningKey] = {}

    def get(self, kid: str) -> SigningKey | None:
        return self._keys.get(kid)

    def load_all(self, keys: Iterable[SigningKey]) -> None:
        """Replace the cached set with ``keys``."""
        self._keys = {key.kid: key for key in keys}

    def keys(self) -> list[SigningKey]:
        return list(self._keys.values())

    def invalidate(self) -> None:
        self._keys = {}

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, kid: object) -> bool:
        return kid in self._keys
