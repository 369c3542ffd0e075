"""
Keyring data models.

A KeyRecord is one identity of the local keyring. Its identity is the
fingerprint; the reference string is only a human readable label.
"""
import hashlib
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..exceptions import KeyringError, KeyringErrorKind

DEFAULT_SEPARATOR = " - "


def compute_fingerprint(public_key_pem: bytes) -> str:
    """
    Compute the fingerprint of a PEM encoded public key.

    Args:
        public_key_pem: Public key in PEM format

    Returns:
        Upper case hex SHA-256 of the DER SubjectPublicKeyInfo
    """
    key = serialization.load_pem_public_key(public_key_pem)
    der = key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )
    return hashlib.sha256(der).hexdigest().upper()


@dataclass(frozen=True)
class KeyRecord:
    """
    One identity of the keyring.

    Attributes:
        name: Display name of the key owner
        email: Email of the key owner
        fingerprint: Full SHA-256 fingerprint (hex, upper case)
        public_key: PEM encoded public key
        private_key: PEM encoded private key, if this is one of our keys
        revoked: Revoked keys are listed but refused for encryption
    """
    name: str
    email: str
    fingerprint: str
    public_key: bytes
    private_key: Optional[bytes] = None
    revoked: bool = False

    @property
    def has_secret(self) -> bool:
        """Whether the private counterpart is available."""
        return self.private_key is not None

    def reference(self, separator: str = DEFAULT_SEPARATOR) -> str:
        """Returns the selection label: name, email and fingerprint."""
        return separator.join((self.name, self.email, self.fingerprint))

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary representation
        """
        return {
            'name': self.name,
            'email': self.email,
            'fingerprint': self.fingerprint,
            'public_key': self.public_key.decode('ascii'),
            'private_key': self.private_key.decode('ascii') if self.private_key else None,
            'revoked': self.revoked,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'KeyRecord':
        """
        Create from dictionary.

        The fingerprint is recomputed from the public key; a stored
        fingerprint that does not match is rejected.

        Raises:
            KeyringError: INVALID_RECORD on missing fields or bad key data
        """
        try:
            public_key = data['public_key'].encode('ascii')
            fingerprint = compute_fingerprint(public_key)
            private_key = data.get('private_key')
            record = cls(
                name=data['name'],
                email=data['email'],
                fingerprint=fingerprint,
                public_key=public_key,
                private_key=private_key.encode('ascii') if private_key else None,
                revoked=bool(data.get('revoked', False)),
            )
        except (KeyError, AttributeError, ValueError, TypeError) as e:
            raise KeyringError(
                "Invalid key record",
                kind=KeyringErrorKind.INVALID_RECORD,
                detail=str(e)
            ) from e

        stored = data.get('fingerprint')
        if stored is not None and not isinstance(stored, str):
            raise KeyringError(
                f"Invalid fingerprint for {record.email}",
                kind=KeyringErrorKind.INVALID_RECORD,
                detail=f"expected a hex string, got {type(stored).__name__}"
            )
        if stored and stored.upper() != fingerprint:
            raise KeyringError(
                f"Fingerprint mismatch for {record.email}",
                kind=KeyringErrorKind.INVALID_RECORD,
                detail=f"stored {stored}, computed {fingerprint}"
            )
        return record

    @classmethod
    def generate(cls, name: str, email: str, key_size: int = 3072) -> 'KeyRecord':
        """
        Generate a new RSA identity.

        Args:
            name: Display name
            email: Email address
            key_size: RSA modulus size in bits

        Returns:
            KeyRecord holding both halves of the key pair
        """
        private = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
        private_pem = private.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        )
        public_pem = private.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo
        )
        return cls(
            name=name,
            email=email,
            fingerprint=compute_fingerprint(public_pem),
            public_key=public_pem,
            private_key=private_pem,
        )

    def public_only(self) -> 'KeyRecord':
        """Returns a copy without the private key (for sharing)."""
        return KeyRecord(
            name=self.name,
            email=self.email,
            fingerprint=self.fingerprint,
            public_key=self.public_key,
            revoked=self.revoked,
        )
