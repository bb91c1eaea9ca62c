"""Conversion of JWKS key material into keys PyJWT can verify with.

IdP keys arrive as bare base64 DER certificates in the ``x5c`` array. The
verification primitive needs a PEM block wrapped at exactly 64 columns, and
PyJWT itself only accepts public keys, so the certificate is normalized here
and its public key extracted with ``cryptography``.
"""

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from jwt.algorithms import RSAAlgorithm
from jwt.exceptions import InvalidKeyError

from tokenbridge.core.errors import TokenInvalid
from tokenbridge.crypto.types import SigningKey

BEGIN_CERT = "-----BEGIN CERTIFICATE-----"
END_CERT = "-----END CERTIFICATE-----"
PEM_LINE_WIDTH = 64


def certificate_payload(raw: str) -> str:
    """Return the bare base64 payload of a certificate string."""
    stripped = raw.replace(BEGIN_CERT, "").replace(END_CERT, "")
    # base64 never contains whitespace, so every run of it is framing
    return "".join(stripped.split())


def normalize_certificate(raw: str) -> str:
    """Wrap an ``x5c`` entry as a PEM certificate with 64-character lines."""
    payload = certificate_payload(raw)
    lines = [
        payload[i : i + PEM_LINE_WIDTH]
        for i in range(0, len(payload), PEM_LINE_WIDTH)
    ]
    return "".join(f"{line}\n" for line in [BEGIN_CERT, *lines, END_CERT])


def load_certificate_public_key(pem: str) -> RSAPublicKey:
    """Extract the RSA public key from a PEM certificate."""
    try:
        cert = x509.load_pem_x509_certificate(pem.encode())
    except ValueError as exc:
        raise TokenInvalid("bad_certificate", "unparseable certificate") from exc
    public_key = cert.public_key()
    if not isinstance(public_key, RSAPublicKey):
        raise TokenInvalid("bad_certificate", "certificate key is not RSA")
    return public_key


def public_key_for(key: SigningKey) -> RSAPublicKey:
    """Resolve the verification key for a JWKS entry.

    The first ``x5c`` certificate wins; later chain entries are ignored. Keys
    without a certificate fall back to the raw RSA modulus and exponent.
    """
    if key.x5c:
        return load_certificate_public_key(normalize_certificate(key.x5c[0]))
    if key.n and key.e:
        try:
            loaded = RSAAlgorithm.from_jwk(
                {"kty": "RSA", "kid": key.kid, "n": key.n, "e": key.e}
            )
        except (InvalidKeyError, ValueError) as exc:
            raise TokenInvalid("bad_key", "modulus/exponent are invalid") from exc
        if not isinstance(loaded, RSAPublicKey):
            raise TokenInvalid("bad_key", "key material is not an RSA public key")
        return loaded
    raise TokenInvalid("unusable_key", f"key {key.kid} has no x5c and no n/e")
