"""Initial root password provisioning.

China Mobile requires the initial password to be RSA-encrypted with the
vendor's published public key. The plaintext is handed back to the caller
once, in the creation result, and is not retrievable afterwards.
"""

from __future__ import annotations

import base64
import secrets

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

PASSWORD_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789!@#$%^&*"
)
PASSWORD_LENGTH = 16

VENDOR_PUBLIC_KEY_PEM = """-----BEGIN PUBLIC KEY-----
MIGfMA0GCSqGSIb3DQEBAQUAA4GNADCBiQKBgQC/VpRysi0bPRLS7sbgQDJHo1MA
t9/bK+nwK5Pe3z0/O4cH5I/8kFNYy4yFsLMM+zyFvVw9C4wzjHaRcmEuF3ziJMC9
PD5ufUWgfO5nSGgZW1cmgjqnhcWJ3i+Azj72RnhKQRCn9DgJduEC9MiKfbyTICGd
6FXf9cxb21nkxI7vtwIDAQAB
-----END PUBLIC KEY-----
"""


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def load_public_key(pem: str = VENDOR_PUBLIC_KEY_PEM) -> rsa.RSAPublicKey:
    key = serialization.load_pem_public_key(pem.encode())
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError("Password encryption key must be an RSA public key")
    return key


def encrypt_password(password: str, public_key: rsa.RSAPublicKey) -> str:
    """RSA PKCS#1 v1.5 encrypt and base64-encode."""
    ciphertext = public_key.encrypt(password.encode("utf-8"), padding.PKCS1v15())
    return base64.b64encode(ciphertext).decode("ascii")
