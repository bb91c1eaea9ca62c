"""Loading of the issuer private key, optionally Fernet-encrypted at rest."""

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from tokenbridge.core.errors import IssuanceError


def decrypt_private_key(encrypted: str, fernet_key: str) -> str:
    """Decrypt a Fernet-encrypted PEM private key."""
    cipher = Fernet(fernet_key.encode())
    return cipher.decrypt(encrypted.encode()).decode()


def load_private_key(private_pem: str, fernet_key: str = "") -> RSAPrivateKey:
    """Load the issuer's RSA private key, decrypting it first when a key is set."""
    try:
        if fernet_key:
            private_pem = decrypt_private_key(private_pem, fernet_key)
        loaded = serialization.load_pem_private_key(
            private_pem.encode(), password=None
        )
    except (InvalidToken, ValueError, TypeError) as exc:
        raise IssuanceError("issuer private key could not be loaded") from exc
    if not isinstance(loaded, RSAPrivateKey):
        raise IssuanceError("issuer private key is not an RSA key")
    return loaded
