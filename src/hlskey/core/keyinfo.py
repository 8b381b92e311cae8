# src/hlskey/core/keyinfo.py
from __future__ import annotations
import io
import logging
import os
from typing import List, Optional

from hlskey.core import crypto
from hlskey.core import io as hlsio
from hlskey.core.errors import (
    DisposeError,
    KeyInfoError,
    KeyInfoIOError,
    KeyNotInitializedError,
    RandomSourceError,
    SerializeError,
    ValidationError,
)

__all__ = [
    "KeyInfo",
    "KeyInfoError",
    "KeyInfoIOError",
    "KeyNotInitializedError",
    "RandomSourceError",
    "SerializeError",
    "DisposeError",
    "ValidationError",
]

log = logging.getLogger(__name__)


class KeyInfo:
    """
    Plik keyinfo dla ffmpeg (-hls_key_info_file):

        <url>
        <ścieżka do pliku klucza>
        [<iv>]

    Konstruktor losuje 16-bajtowy klucz i zapisuje go do hls_key_*.bin
    w katalogu tymczasowym. Pliki utworzone przez obiekt usuwa wyłącznie
    dispose() (albo wyjście z bloku `with`); nie ma finalizera.
    """

    def __init__(self, url: str, tmp_dir: Optional[str] = None):
        self.url = url
        self.iv = ""
        self._tmp_dir = tmp_dir
        self._key: Optional[bytes] = crypto.random_bytes(crypto.KEY_SIZE)
        # pliki, które sami utworzyliśmy i które sprząta dispose()
        self._owned_key_file: Optional[str] = hlsio.write_key_file(self._key, tmp_dir)
        self._info_file: Optional[str] = None
        self.key_file = self._owned_key_file

    def __repr__(self) -> str:
        return f"KeyInfo(url={self.url!r}, key_file={self.key_file!r}, iv={'set' if self.iv else 'unset'})"

    def __enter__(self) -> "KeyInfo":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.dispose()
            return
        # nie przykrywamy pierwotnego wyjątku błędem sprzątania
        try:
            self.dispose()
        except DisposeError:
            log.warning("cleanup after error failed", exc_info=True)

    @property
    def info_file(self) -> Optional[str]:
        return self._info_file

    def get_key(self) -> Optional[bytes]:
        # kopia, nigdy wewnętrzny bufor
        if self._key is None:
            return None
        return bytes(bytearray(self._key))

    def set_iv(self, value: str, validate: bool = False) -> "KeyInfo":
        if validate and not crypto.is_hex_iv(value):
            raise ValidationError(f"IV must be {crypto.IV_SIZE * 2} hex characters, got {value!r}")
        self.iv = value
        return self

    def set_key_file(self, path: str, validate: bool = False) -> "KeyInfo":
        """
        Podmienia ścieżkę klucza zapisywaną w keyinfo. Obiekt nie przejmuje
        własności `path`; wygenerowany wcześniej plik klucza nadal zostanie
        usunięty przez dispose().
        """
        if validate:
            if not os.path.isfile(path):
                raise ValidationError(f"key file does not exist: {path}")
            size = os.path.getsize(path)
            if size != crypto.KEY_SIZE:
                raise ValidationError(f"key file must be {crypto.KEY_SIZE} bytes, got {size}: {path}")
        self.key_file = path
        return self

    def rand_iv(self, best_effort: bool = False) -> "KeyInfo":
        """
        Losowy IV (32 znaki hex, małe litery). Błąd źródła losowości jest
        propagowany; tylko `best_effort=True` pozwala na zerowy IV.
        """
        try:
            self.iv = crypto.random_hex(crypto.IV_SIZE)
        except RandomSourceError:
            if not best_effort:
                raise
            log.warning("random IV unavailable, falling back to all-zero IV")
            self.iv = crypto.ZERO_IV
        return self

    def dispose(self) -> None:
        """
        Usuwa wszystkie pliki utworzone przez obiekt. Brak pliku nie jest
        błędem, więc ponowne wywołanie jest bezpieczne. Wszystkie błędy
        usuwania są zbierane w jeden DisposeError.
        """
        errors: List[OSError] = []
        for attr in ("_owned_key_file", "_info_file"):
            path = getattr(self, attr)
            if not path:
                continue
            try:
                hlsio.remove_file(path)
            except OSError as e:
                errors.append(e)
            setattr(self, attr, None)
        self.key_file = ""
        if errors:
            raise DisposeError("removing temporary files failed", errors)

    def _lines(self) -> List[str]:
        lines = [self.url + "\n", self.key_file + "\n"]
        if self.iv:
            lines.append(self.iv + "\n")
        return lines

    def render(self) -> str:
        return "".join(self._lines())

    def write_to(self, sink) -> int:
        """
        Zapisuje keyinfo do `sink` (strumień binarny lub tekstowy).
        Zwraca liczbę bajtów (UTF-8). Przy błędzie rzuca SerializeError
        z `written` = bajty przyjęte przed błędem.
        """
        text_sink = isinstance(sink, io.TextIOBase)
        written = 0
        for name, line in zip(("url", "key file", "iv"), self._lines()):
            data = line.encode("utf-8")
            try:
                if text_sink:
                    sink.write(line)
                    n = len(data)
                else:
                    n = sink.write(data)
                    if n is None:
                        n = len(data)
            except (OSError, ValueError) as e:
                raise SerializeError(f"writing {name} failed: {e}", written) from e
            written += n
            # krótki zapis to błąd: keyinfo musi się zgadzać co do bajtu
            if n < len(data):
                raise SerializeError(f"short write of {name}: {n}/{len(data)} bytes", written)
        return written

    def _require_key(self) -> None:
        if self._key is None:
            raise KeyNotInitializedError("key not initialized")

    def write_to_temp_file(self) -> str:
        """
        Zapisuje keyinfo do hls_keyinfo_*.txt. Kolejne wywołania nadpisują
        ten sam plik. Plik należy do obiektu (dispose() go usuwa).
        """
        self._require_key()
        if self._info_file is None:
            fd, path = hlsio.create_temp("hls_keyinfo_", ".txt", self._tmp_dir)
            self._info_file = path
            f = os.fdopen(fd, "wb")
        else:
            path = self._info_file
            try:
                f = open(path, "wb")
            except OSError as e:
                raise KeyInfoIOError(f"opening {path} failed: {e}") from e
        with f:
            self.write_to(f)
        return path

    def write_to_file(self, path: str) -> None:
        # create/truncate; ścieżka należy do wołającego i nie jest sprzątana
        self._require_key()
        try:
            f = open(path, "wb")
        except OSError as e:
            raise KeyInfoIOError(f"opening {path} failed: {e}") from e
        with f:
            self.write_to(f)

    def export_key(self, path: str) -> str:
        """Zapisuje surowy klucz pod `path` (plik wołającego, dispose() go nie rusza)."""
        self._require_key()
        hlsio.write_bytes(path, self._key)
        return os.path.abspath(path)
