from __future__ import annotations

import logging
import os

DEFAULT_DB = os.getenv('KWAZAM_DB', os.path.join('data', 'kwazam_saves.db'))
LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'


def env_flag(name: str, default: str = '0') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def configure_logging(default_level: int = logging.INFO) -> None:
    """Configures the root logger. ``KWAZAM_LOG_LEVEL`` overrides the level."""
    level = default_level
    level_name = os.getenv('KWAZAM_LOG_LEVEL')
    if level_name:
        level = getattr(logging, level_name.upper(), default_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
