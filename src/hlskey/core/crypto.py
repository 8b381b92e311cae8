# src/hlskey/core/crypto.py
from __future__ import annotations
import os

from hlskey.core.errors import RandomSourceError

KEY_SIZE = 16
IV_SIZE = 16
ZERO_IV = "0" * (IV_SIZE * 2)


def random_bytes(n: int) -> bytes:
    """
    n bajtów z CSPRNG systemu. Rzuca RandomSourceError, gdy źródło
    jest niedostępne lub zawodzi; bez ponawiania.
    """
    if n <= 0:
        raise ValueError("n must be positive")
    try:
        data = os.urandom(n)
    except (OSError, NotImplementedError) as e:
        raise RandomSourceError(f"secure random source unavailable: {e}") from e
    if len(data) != n:
        raise RandomSourceError(f"short read from random source: {len(data)}/{n}")
    return data


def random_hex(n: int) -> str:
    # małe litery, 2*n znaków
    return random_bytes(n).hex()


def is_hex_iv(value: str) -> bool:
    if len(value) != IV_SIZE * 2:
        return False
    return all(c in "0123456789abcdefABCDEF" for c in value)
