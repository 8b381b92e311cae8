from pathlib import Path
from copy import deepcopy
import json, os

APP_DIR = Path(os.getenv('APPDATA') or Path.home() / '.config') / 'hlskey'
CFG_PATH = APP_DIR / 'config.json'

DEFAULTS = {
  "tmp_dir": None,
  "rand_iv": False,
  "log_level": "WARNING",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

class ConfigError(Exception):
    pass

def get_config_path() -> Path:
    env = os.getenv('HLSKEY_CONFIG')
    return Path(env) if env else CFG_PATH

def load_config(path=None) -> dict:
    """Domyślne wartości nadpisane zawartością pliku; brak pliku = same domyślne (nic nie zapisujemy)."""
    p = Path(path) if path else get_config_path()
    cfg = deepcopy(DEFAULTS)
    try:
        data = json.loads(p.read_text(encoding='utf-8'))
    except FileNotFoundError:
        return cfg
    except (OSError, ValueError) as e:
        raise ConfigError(f"cannot read config {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config {p} must be a JSON object")
    cfg.update(data)
    level = cfg.get("log_level")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(f"config {p}: unknown log_level {level!r}")
    return cfg
