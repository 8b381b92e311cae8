# src/hlskey/core/errors.py
from __future__ import annotations
from typing import List


class KeyInfoError(Exception):
    pass


class RandomSourceError(KeyInfoError):
    pass


class KeyNotInitializedError(KeyInfoError):
    pass


class ValidationError(KeyInfoError, ValueError):
    pass


class KeyInfoIOError(KeyInfoError, OSError):
    pass


class SerializeError(KeyInfoIOError):
    """
    Zapis keyinfo przerwany w trakcie. `written` to liczba bajtów,
    które ujście przyjęło przed błędem (zapis nie jest atomowy).
    """

    def __init__(self, message: str, written: int = 0):
        super().__init__(message)
        self.written = written


class DisposeError(KeyInfoIOError):
    """Zbiorczy błąd sprzątania: `errors` zawiera wszystkie nieudane usunięcia."""

    def __init__(self, message: str, errors: List[OSError]):
        super().__init__(message)
        self.errors = list(errors)

    def __str__(self) -> str:
        details = "; ".join(str(e) for e in self.errors)
        return f"{self.args[0]}: {details}" if details else self.args[0]
