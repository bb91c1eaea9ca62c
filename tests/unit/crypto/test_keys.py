"""Tests for issuer private key loading."""

import pytest
from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from factories import IssuerKeypair, encrypt_pem
from tokenbridge.core.errors import IssuanceError
from tokenbridge.crypto.keys import decrypt_private_key, load_private_key


class TestLoadPrivateKey:
    """Tests for loading plain and Fernet-encrypted issuer keys."""

    def test_plain_pem(self, issuer_keypair: IssuerKeypair) -> None:
        loaded = load_private_key(issuer_keypair.private_key_pem)
        assert isinstance(loaded, RSAPrivateKey)

    def test_encrypted_pem(self, issuer_keypair: IssuerKeypair) -> None:
        fernet_key = Fernet.generate_key().decode()
        encrypted = encrypt_pem(issuer_keypair.private_key_pem, fernet_key)
        assert decrypt_private_key(encrypted, fernet_key) == (
            issuer_keypair.private_key_pem
        )
        assert isinstance(load_private_key(encrypted, fernet_key), RSAPrivateKey)

    def test_wrong_fernet_key(self, issuer_keypair: IssuerKeypair) -> None:
        encrypted = encrypt_pem(
            issuer_keypair.private_key_pem, Fernet.generate_key().decode()
        )
        with pytest.raises(IssuanceError):
            load_private_key(encrypted, Fernet.generate_key().decode())

    def test_garbage_pem(self) -> None:
        with pytest.raises(IssuanceError):
            load_private_key("not a key")

    def test_non_rsa_key(self) -> None:
        pem = ec.generate_private_key(ec.SECP256R1()).private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode()
        with pytest.raises(IssuanceError):
            load_private_key(pem)
