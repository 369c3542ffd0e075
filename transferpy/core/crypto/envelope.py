"""
Envelope encryption engine.

Content is always sealed with AES-256-GCM under a random or derived
key. The key reaches the reader either through a passphrase (PBKDF2)
or wrapped with RSA-OAEP for every recipient.

Layout (all integers big endian):

    symmetric:   MAGIC | version | 0x01 | salt(16) | iterations(4) | nonce(12) | tag(16) | ciphertext
    public key:  MAGIC | version | 0x02 | count(2) | { fingerprint(32) | size(2) | wrapped }*
                 | nonce(12) | tag(16) | ciphertext

The header up to the nonce is authenticated as associated data.
"""
import struct
from typing import Iterable, Optional, Sequence, Tuple

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..keyring.models import KeyRecord
from .key_derivation import PasswordKeyDeriver

MAGIC = b'TPYE'
VERSION = 1
MODE_SYMMETRIC = 0x01
MODE_PUBLIC_KEY = 0x02

SALT_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16
SESSION_KEY_SIZE = 32
FINGERPRINT_SIZE = 32


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None
    )


class EnvelopeEngine:
    """
    Low level encryption engine.

    Raises ``ValueError`` on any cryptographic failure (bad key, revoked
    recipient, wrong passphrase, tampered data). Callers translate those
    into EncryptionError.
    """

    def __init__(self, iterations: int = 200000):
        """
        Initialize the engine.

        Args:
            iterations: PBKDF2 iterations for new symmetric envelopes
        """
        self._iterations = iterations

    def encrypt_symmetric(self, plaintext: bytes, passphrase: str) -> bytes:
        """Seal plaintext under a passphrase."""
        salt = get_random_bytes(SALT_SIZE)
        key = PasswordKeyDeriver(self._iterations).derive(passphrase, salt)
        header = MAGIC + struct.pack('>BB', VERSION, MODE_SYMMETRIC)
        header += salt + struct.pack('>I', self._iterations)
        return self._seal(key, header, plaintext)

    def encrypt_to_recipients(self, plaintext: bytes, recipients: Sequence[KeyRecord]) -> bytes:
        """Seal plaintext for exactly the given recipients."""
        if not recipients:
            raise ValueError("At least one recipient is required")

        session_key = get_random_bytes(SESSION_KEY_SIZE)
        header = MAGIC + struct.pack('>BBH', VERSION, MODE_PUBLIC_KEY, len(recipients))
        for record in recipients:
            if record.revoked:
                raise ValueError(f"Key {record.fingerprint} is revoked")
            public_key = serialization.load_pem_public_key(record.public_key)
            if not isinstance(public_key, rsa.RSAPublicKey):
                raise ValueError(f"Key {record.fingerprint} is not an RSA key")
            wrapped = public_key.encrypt(session_key, _oaep())
            header += bytes.fromhex(record.fingerprint)
            header += struct.pack('>H', len(wrapped)) + wrapped
        return self._seal(session_key, header, plaintext)

    def decrypt(
        self,
        envelope: bytes,
        passphrase: Optional[str] = None,
        private_keys: Iterable[KeyRecord] = ()
    ) -> bytes:
        """
        Open an envelope.

        Args:
            envelope: Ciphertext produced by this engine
            passphrase: Passphrase for symmetric envelopes
            private_keys: Keys (with secrets) to try for public-key envelopes

        Returns:
            Plaintext bytes
        """
        mode, offset = self._read_preamble(envelope)

        if mode == MODE_SYMMETRIC:
            if not passphrase:
                raise ValueError("Passphrase required for symmetric envelope")
            salt = envelope[offset:offset + SALT_SIZE]
            try:
                (iterations,) = struct.unpack_from('>I', envelope, offset + SALT_SIZE)
            except struct.error as e:
                raise ValueError(f"Truncated envelope header: {e}") from e
            offset += SALT_SIZE + 4
            key = PasswordKeyDeriver(iterations).derive(passphrase, salt)
            return self._open(key, envelope, offset)

        wrapped_keys, offset = self._read_recipients(envelope, offset)
        candidates = {k.fingerprint: k for k in private_keys if k.has_secret}
        for fingerprint, wrapped in wrapped_keys:
            record = candidates.get(fingerprint)
            if record is None:
                continue
            private_key = serialization.load_pem_private_key(record.private_key, password=None)
            session_key = private_key.decrypt(wrapped, _oaep())
            return self._open(session_key, envelope, offset)

        raise ValueError("No matching private key for any recipient")

    def recipients(self, envelope: bytes) -> Tuple[str, ...]:
        """Returns the recipient fingerprints of an envelope (empty if symmetric)."""
        mode, offset = self._read_preamble(envelope)
        if mode == MODE_SYMMETRIC:
            return ()
        wrapped_keys, _ = self._read_recipients(envelope, offset)
        return tuple(fingerprint for fingerprint, _ in wrapped_keys)

    def _seal(self, key: bytes, header: bytes, plaintext: bytes) -> bytes:
        nonce = get_random_bytes(NONCE_SIZE)
        cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
        cipher.update(header)
        ciphertext, tag = cipher.encrypt_and_digest(plaintext)
        return header + nonce + tag + ciphertext

    def _open(self, key: bytes, envelope: bytes, offset: int) -> bytes:
        header = envelope[:offset]
        nonce = envelope[offset:offset + NONCE_SIZE]
        tag = envelope[offset + NONCE_SIZE:offset + NONCE_SIZE + TAG_SIZE]
        if len(tag) != TAG_SIZE:
            raise ValueError("Truncated envelope")
        cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
        cipher.update(header)
        # Raises ValueError("MAC check failed") on wrong key or tampering
        return cipher.decrypt_and_verify(envelope[offset + NONCE_SIZE + TAG_SIZE:], tag)

    def _read_preamble(self, envelope: bytes) -> Tuple[int, int]:
        if len(envelope) < len(MAGIC) + 2 or not envelope.startswith(MAGIC):
            raise ValueError("Not a transferpy envelope")
        version, mode = struct.unpack_from('>BB', envelope, len(MAGIC))
        if version != VERSION:
            raise ValueError(f"Unsupported envelope version {version}")
        if mode not in (MODE_SYMMETRIC, MODE_PUBLIC_KEY):
            raise ValueError(f"Unknown envelope mode {mode}")
        return mode, len(MAGIC) + 2

    def _read_recipients(self, envelope: bytes, offset: int):
        try:
            (count,) = struct.unpack_from('>H', envelope, offset)
            offset += 2
            wrapped_keys = []
            for _ in range(count):
                fingerprint = envelope[offset:offset + FINGERPRINT_SIZE].hex().upper()
                offset += FINGERPRINT_SIZE
                (size,) = struct.unpack_from('>H', envelope, offset)
                offset += 2
                wrapped_keys.append((fingerprint, envelope[offset:offset + size]))
                offset += size
        except struct.error as e:
            raise ValueError(f"Truncated envelope header: {e}") from e
        return wrapped_keys, offset
