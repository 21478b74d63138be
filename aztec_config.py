"""
Decoder configuration and logging setup.

Configuration can come from a JSON file:

    {
        "default_charset": "ISO-8859-1",
        "log_level": "INFO",
        "log_file": null
    }

and from the environment: DEBUG=true switches logging to DEBUG,
AZTEC_CHARSET overrides the default character set.
"""

import codecs
import json
import logging
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Aztec data without an ECI designator is ISO/IEC 8859-1
DEFAULT_CHARSET = "ISO-8859-1"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass(frozen=True)
class DecoderConfig:
    default_charset: str = DEFAULT_CHARSET
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        try:
            codecs.lookup(self.default_charset)
        except LookupError:
            raise ValueError(f"Unknown character set: {self.default_charset}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")


def load_config(config_path):
    """Load a DecoderConfig from a JSON file. Unknown keys are ignored."""
    path = Path(config_path)
    if not path.exists():
        raise ValueError(f"Config file not found: {config_path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a JSON object")

    known = {k: data[k] for k in ("default_charset", "log_level", "log_file") if k in data}
    config = DecoderConfig(**known)
    logger.info(f"Configuration loaded from: {path.absolute()}")
    return config


def config_from_env(config=None, environ=None):
    """Apply DEBUG and AZTEC_CHARSET environment overrides."""
    config = config or DecoderConfig()
    environ = os.environ if environ is None else environ

    if environ.get("DEBUG", "").lower() == "true":
        config = replace(config, log_level="DEBUG")
    charset = environ.get("AZTEC_CHARSET")
    if charset:
        config = replace(config, default_charset=charset)
    return config


def setup_logging(config=None):
    """Console logging, plus a log file when the config names one."""
    config = config or DecoderConfig()
    handlers = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, mode='w'))

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
