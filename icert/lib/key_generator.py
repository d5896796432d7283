"""Key-pair generation for the supported algorithms."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

from .config import MIN_RSA_KEY_SIZE, KeyAlgorithm
from .errors import KeyGenerationFailed, UnsupportedAlgorithm

logger = logging.getLogger(__name__)

PrivateKey = ed25519.Ed25519PrivateKey | rsa.RSAPrivateKey
PublicKey = ed25519.Ed25519PublicKey | rsa.RSAPublicKey

# Returns n bytes from a random source.
RandomBytes = Callable[[int], bytes]

SERIAL_NUMBER_BYTES = 20


@dataclass(frozen=True)
class KeyPair:
    """Algorithm-tagged private key and its public half."""

    algorithm: KeyAlgorithm
    private_key: PrivateKey

    @property
    def public_key(self) -> PublicKey:
        return self.private_key.public_key()


class Ed25519Strategy:
    """Ed25519 keys; signatures carry no separate digest."""

    algorithm = KeyAlgorithm.ED25519
    key_type = ed25519.Ed25519PrivateKey

    def generate(self) -> ed25519.Ed25519PrivateKey:
        return ed25519.Ed25519PrivateKey.generate()

    def signature_hash(self) -> hashes.HashAlgorithm | None:
        return None


class RSAStrategy:
    """RSA keys with a fixed modulus size, signed with SHA-256."""

    algorithm = KeyAlgorithm.RSA
    key_type = rsa.RSAPrivateKey

    def __init__(self, key_size: int = 4096) -> None:
        if key_size < MIN_RSA_KEY_SIZE:
            raise ValueError(f"RSA key size must be at least {MIN_RSA_KEY_SIZE} bits")
        self.key_size = key_size

    def generate(self) -> rsa.RSAPrivateKey:
        return rsa.generate_private_key(
            public_exponent=65537,
            key_size=self.key_size,
        )

    def signature_hash(self) -> hashes.HashAlgorithm | None:
        return hashes.SHA256()


KeyStrategy = Ed25519Strategy | RSAStrategy


class KeyGenerator:
    """Produces fresh key pairs, dispatching on KeyAlgorithm."""

    def __init__(self, rsa_key_size: int = 4096) -> None:
        """Initialize generator with the fixed RSA modulus size.

        Args:
            rsa_key_size: RSA modulus size in bits (at least 2048)
        """
        self._strategies: dict[KeyAlgorithm, KeyStrategy] = {
            KeyAlgorithm.ED25519: Ed25519Strategy(),
            KeyAlgorithm.RSA: RSAStrategy(rsa_key_size),
        }

    def strategy(self, algorithm: KeyAlgorithm | str) -> KeyStrategy:
        """Return strategy for the algorithm.

        Raises:
            UnsupportedAlgorithm: If algorithm is not Ed25519 or RSA
        """
        return self._strategies[KeyAlgorithm.parse(algorithm)]

    def strategy_for_private_key(self, private_key: object) -> KeyStrategy:
        """Return strategy matching an already loaded private key.

        Raises:
            UnsupportedAlgorithm: If key is neither Ed25519 nor RSA
        """
        for strategy in self._strategies.values():
            if isinstance(private_key, strategy.key_type):
                return strategy
        raise UnsupportedAlgorithm(f"unsupported private key type: {type(private_key).__name__}")

    def generate_key_pair(self, algorithm: KeyAlgorithm | str) -> KeyPair:
        """Generate a fresh key pair using the backend CSPRNG.

        Args:
            algorithm: KeyAlgorithm member or tag ("ed25519", "rsa")

        Returns:
            KeyPair tagged with the resolved algorithm

        Raises:
            UnsupportedAlgorithm: If algorithm is not supported
            KeyGenerationFailed: If the backend fails to generate the key
        """
        strategy = self.strategy(algorithm)
        try:
            private_key = strategy.generate()
        except Exception as e:
            raise KeyGenerationFailed(
                f"{strategy.algorithm.value} key generation failed: {e}"
            ) from e

        logger.debug("Generated %s key pair", strategy.algorithm.value)
        return KeyPair(algorithm=strategy.algorithm, private_key=private_key)


def generate_serial_number(random_bytes: RandomBytes = secrets.token_bytes) -> int:
    """Generate certificate serial number from the random source.

    Draws 20 bytes and drops one bit, giving a positive integer of at most
    159 bits that always encodes within the 20-octet RFC 5280 limit.

    Args:
        random_bytes: Random source returning n bytes per call

    Returns:
        Integer serial number for x509.CertificateBuilder.serial_number()
    """
    raw = random_bytes(SERIAL_NUMBER_BYTES)
    if len(raw) != SERIAL_NUMBER_BYTES:
        raise ValueError(f"random source returned {len(raw)} bytes, expected {SERIAL_NUMBER_BYTES}")
    return max(int.from_bytes(raw, "big") >> 1, 1)
