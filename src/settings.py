"""Runtime configuration for the terminal task list.

Decisions:
- Values come from the real environment first, then an optional project
  .env file, then built-in defaults.
- Data lives under <project>/data unless TASKLIST_DATA_DIR points elsewhere.
- Logs go to stderr at WARNING by default; TASKLIST_LOG_FILE redirects them
  so the redrawn list is not interleaved with log lines.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent
ENV_FILE = PROJECT_ROOT / '.env'
DEFAULT_DATA_DIR = PROJECT_ROOT / 'data'

ENV_KEYS = {
    'TASKLIST_DATA_DIR',
    'TASKLIST_ALT_SCREEN',
    'TASKLIST_LOG_LEVEL',
    'TASKLIST_LOG_FILE',
}

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

logger = logging.getLogger(__name__)


def truthy(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


def read_env_file(path: Path) -> Dict[str, str]:
    """Parse KEY=VALUE lines from a .env file, keeping only known keys.

    Blank lines and '#' comments are skipped; surrounding quotes are removed.
    A missing or unreadable file yields an empty mapping.
    """
    overrides: Dict[str, str] = {}
    if not path.exists():
        return overrides
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable %s: %s", path, exc)
        return overrides
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if k in ENV_KEYS:
            overrides[k] = v
    return overrides


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    alt_screen: bool = True
    log_level: str = 'WARNING'
    log_file: Optional[Path] = None
    force_color: bool = False
    no_color: bool = False
    colorterm: str = ''

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 env_file: Path = ENV_FILE) -> 'Settings':
        env = os.environ if environ is None else environ
        file_values = read_env_file(env_file)

        def pick(key: str) -> Optional[str]:
            return env.get(key) or file_values.get(key)

        data_dir = pick('TASKLIST_DATA_DIR')
        log_file = pick('TASKLIST_LOG_FILE')
        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
            alt_screen=truthy(pick('TASKLIST_ALT_SCREEN'), True),
            log_level=(pick('TASKLIST_LOG_LEVEL') or 'WARNING').upper(),
            log_file=Path(log_file).expanduser() if log_file else None,
            force_color=env.get('FORCE_COLOR', '').lower() in {"1", "true", "yes", "on"},
            no_color=env.get('NO_COLOR') is not None,
            colorterm=env.get('COLORTERM', '').lower(),
        )


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level, None)
    if not isinstance(level, int):
        level = logging.WARNING
    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(settings.log_file, encoding='utf-8')
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    logger.debug("logging configured at %s", logging.getLevelName(level))
