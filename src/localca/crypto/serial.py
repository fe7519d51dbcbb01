import secrets

from ..errors import CryptoError

SERIAL_BITS = 128


def random_serial_number() -> int:
    """Uniform serial in [1, 2**128); X.509 serials must be positive."""
    try:
        while True:
            n = secrets.randbelow(1 << SERIAL_BITS)
            if n:
                return n
    except OSError as e:
        raise CryptoError(f"failed to generate serial number: {e}") from e
