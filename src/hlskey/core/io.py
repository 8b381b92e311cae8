# src/hlskey/core/io.py
from __future__ import annotations
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple

from hlskey.core.errors import KeyInfoIOError

log = logging.getLogger(__name__)


def create_temp(prefix: str, suffix: str, tmp_dir: Optional[str] = None) -> Tuple[int, str]:
    """
    Tworzy nowy plik o unikalnej nazwie (O_EXCL) w katalogu tymczasowym.
    Zwraca (fd, ścieżka_absolutna); zamknięcie fd należy do wołającego.
    """
    try:
        fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=tmp_dir)
    except OSError as e:
        raise KeyInfoIOError(f"creating temp file {prefix}*{suffix} failed: {e}") from e
    path = os.path.abspath(path)
    log.debug("created %s", path)
    return fd, path


def write_fd(fd: int, data: bytes) -> None:
    """Synchroniczny zapis całości `data` do fd (flush + fsync), potem zamyka fd."""
    with os.fdopen(fd, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())


def write_key_file(data: bytes, tmp_dir: Optional[str] = None) -> str:
    """
    Zapisuje surowe bajty klucza do hls_key_*.bin.
    Przy błędzie zapisu plik jest usuwany, zanim błąd wyjdzie dalej.
    """
    fd, path = create_temp("hls_key_", ".bin", tmp_dir)
    try:
        write_fd(fd, data)
    except OSError as e:
        Path(path).unlink(missing_ok=True)
        raise KeyInfoIOError(f"writing key file {path} failed: {e}") from e
    return path


def write_bytes(path: str, data: bytes) -> None:
    # create/truncate; plik należy do wołającego
    try:
        with open(path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        raise KeyInfoIOError(f"writing {path} failed: {e}") from e


def remove_file(path: str) -> None:
    """
    Usuwa plik; brak pliku to sukces. Pozostałe OSError lecą dalej,
    żeby wołający mógł je zebrać.
    """
    Path(path).unlink(missing_ok=True)
    log.debug("removed %s", path)
