# src/hlskey/main.py
import argparse
import logging
import sys

from hlskey.config import manager as cfgman
from hlskey.core.keyinfo import DisposeError, KeyInfo, KeyInfoError
from hlskey.utils.logger import configure_logging

log = logging.getLogger("hlskey.main")

def parse_args(argv):
    p = argparse.ArgumentParser(prog="hlskey", description="Generator pliku keyinfo dla ffmpeg (-hls_key_info_file)")
    p.add_argument("url", help="URL, pod którym odtwarzacz pobierze klucz")
    g = p.add_mutually_exclusive_group(required=True)
    g.add_argument("--key-out", metavar="PATH", help="Zapisz klucz pod PATH i wskaż go w keyinfo")
    g.add_argument("--keep", action="store_true", help="Nie usuwaj tymczasowego pliku klucza po wyjściu")
    iv = p.add_mutually_exclusive_group()
    iv.add_argument("--iv", metavar="HEX", help="IV jako 32 znaki hex")
    iv.add_argument("--rand-iv", action=argparse.BooleanOptionalAction, default=None, help="Losowy IV")
    p.add_argument("-o", "--output", metavar="PATH", help="Plik keyinfo (domyślnie stdout)")
    p.add_argument("--config", metavar="PATH", help="Ścieżka do config.json")
    p.add_argument("--json-log", metavar="PATH", help="Ścieżka do logu JSON")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)

def _dispose_after_error(k: KeyInfo) -> None:
    # błąd sprzątania nie może przykryć pierwotnego wyjątku
    try:
        k.dispose()
    except DisposeError:
        log.warning("cleanup after error failed", exc_info=True)

def _build(ns, cfg) -> KeyInfo:
    k = KeyInfo(ns.url, tmp_dir=cfg.get("tmp_dir"))
    try:
        if ns.iv is not None:
            k.set_iv(ns.iv, validate=True)
        elif ns.rand_iv if ns.rand_iv is not None else cfg.get("rand_iv", False):
            k.rand_iv()
        if ns.key_out:
            k.set_key_file(k.export_key(ns.key_out))
    except BaseException:
        _dispose_after_error(k)
        raise
    return k

def _emit(k: KeyInfo, output) -> None:
    if output:
        k.write_to_file(output)
        print(f"[OK] keyinfo: {output}", file=sys.stderr)
    else:
        sys.stdout.write(k.render())

def run_cli(ns) -> int:
    try:
        cfg = cfgman.load_config(ns.config)
        configure_logging("DEBUG" if ns.verbose else cfg.get("log_level", "WARNING"), ns.json_log)
        k = _build(ns, cfg)
        if ns.keep:
            # plik klucza ma przeżyć proces: dispose() tylko przy błędzie
            try:
                _emit(k, ns.output)
            except BaseException:
                _dispose_after_error(k)
                raise
            log.info("kept key file %s", k.key_file)
            return 0
        with k:
            _emit(k, ns.output)
        return 0
    except (KeyInfoError, cfgman.ConfigError, OSError) as e:
        log.debug("failed", exc_info=True)
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

def main() -> int:
    ns = parse_args(sys.argv[1:])
    return run_cli(ns)

if __name__ == "__main__":
    raise SystemExit(main())
