"""Passphrase-based key derivation."""
import hashlib
from typing import Union


class PasswordKeyDeriver:
    """Derives AES keys from passphrases using PBKDF2 with SHA-512."""

    def __init__(self, iterations: int = 200000, key_size: int = 32):
        """Initializes PBKDF2 key deriver."""
        if iterations <= 0:
            raise ValueError("Iterations must be positive")
        self.iterations = iterations
        self.key_size = key_size

    def derive(self, passphrase: Union[str, bytes], salt: bytes) -> bytes:
        """Derives key from passphrase and salt."""
        if not salt:
            raise ValueError("Salt is required for key derivation")

        return hashlib.pbkdf2_hmac(
            'sha512',
            passphrase if isinstance(passphrase, bytes) else passphrase.encode(),
            salt,
            self.iterations,
            self.key_size
        )
