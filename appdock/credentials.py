"""Secret generation for application instances."""

import logging
import secrets

import bcrypt

from appdock.errors import EntropyUnavailable
from appdock.redact import register_secret

logger = logging.getLogger(__name__)


def generate_secret(byte_length: int) -> str:
    """Return a random hex string of 2 * byte_length characters.

    Raises EntropyUnavailable if the OS random source fails. There is no
    fallback to a weaker generator.
    """
    if byte_length <= 0:
        raise ValueError(f"byte_length must be positive, got {byte_length}")
    try:
        value = secrets.token_hex(byte_length)
    except (OSError, NotImplementedError) as e:
        raise EntropyUnavailable(e) from e
    register_secret(value)
    return value


def generate_secrets(lengths: dict[str, int]) -> dict[str, str]:
    """Generate one secret per key (key -> byte length)."""
    return {key: generate_secret(length) for key, length in lengths.items()}


def hash_password(password: str) -> str:
    """bcrypt hash usable in a Traefik basicAuth users entry."""
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
