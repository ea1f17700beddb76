"""Common cryptographic utilities.
"""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa


class CryptoUtils:
    """Utility class for RSA key handling and signatures."""

    @staticmethod
    def generate_key_pair(
        key_size: int = 2048, public_exponent: int = 65537
    ) -> tuple[str, str]:
        """Generate an RSA key pair and return (public_pem, private_pem)."""
        private_key = rsa.generate_private_key(
            public_exponent=public_exponent,
            key_size=key_size,
        )
        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return public_pem.decode(), private_pem.decode()

    @staticmethod
    def load_private_key(private_pem: str) -> rsa.RSAPrivateKey:
        """Load a PEM private key, rejecting anything that is not RSA."""
        key = serialization.load_pem_private_key(private_pem.encode(), password=None)
        if not isinstance(key, rsa.RSAPrivateKey):
            msg = "Private key is not an RSA key"
            raise TypeError(msg)
        return key

    @staticmethod
    def load_public_key(public_pem: str) -> rsa.RSAPublicKey:
        """Load a PEM public key, rejecting anything that is not RSA."""
        key = serialization.load_pem_public_key(public_pem.encode())
        if not isinstance(key, rsa.RSAPublicKey):
            msg = "Public key is not an RSA key"
            raise TypeError(msg)
        return key

    @staticmethod
    def public_pem_from_private(private_pem: str) -> str:
        """Derive the SPKI PEM public key from a PEM private key."""
        private_key = CryptoUtils.load_private_key(private_pem)
        return (
            private_key.public_key()
            .public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
            .decode()
        )

    @staticmethod
    def sign(data: str, private_pem: str) -> str:
        """Sign data with RSA PKCS#1 v1.5 over SHA-256, return hex."""
        private_key = CryptoUtils.load_private_key(private_pem)
        signature = private_key.sign(
            data.encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        return signature.hex()

    @staticmethod
    def verify(data: str, signature_hex: str, public_pem: str) -> bool:
        """Check a hex signature produced by sign()."""
        public_key = CryptoUtils.load_public_key(public_pem)
        try:
            public_key.verify(
                bytes.fromhex(signature_hex),
                data.encode("utf-8"),
                padding.PKCS1v15(),
                hashes.SHA256(),
            )
        except (InvalidSignature, ValueError):
            return False
        return True

    @staticmethod
    def strip_pem(pem: str) -> str:
        """Return the base64 body of a PEM block without the armour lines."""
        return "".join(
            line.strip()
            for line in pem.strip().splitlines()
            if line.strip() and not line.startswith("-----")
        )
