from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .datamodels import SORT_FIELDS, SORT_ORDERS, TableFilters, TableOptions, TableSorts
from .errors import ConfigError

__version__ = "0.3.0"

# --- Configuration ---
CONFIG_PATH = os.path.expanduser("~/.config/wallabag-tui/config.json")
CACHE_PATH = os.path.expanduser("~/.cache/wallabag-tui/entries.json")

HTTP_TIMEOUT = 15
RETRY_TOTAL = 5
RETRY_BACKOFF = 0.3
RETRY_STATUSES = [429, 500, 502, 503, 504]

DEFAULT_ENTRIES_PER_API_CALL = 55
STATUS_CLEAR_DELAY = 5.0
SPINNER_INTERVAL = 0.1
CONTENT_WIDTH = 72

REQUEST_HEADERS = {"User-Agent": f"wallabag-tui/{__version__}"}

REQUIRED_KEYS = ("wallabag_url", "client_id", "client_secret", "username", "password")
FLAG_DEFAULTS = {"default_unread": True, "default_starred": False, "default_public": False}

# --- Logging ---
logger = logging.getLogger("wallabag_tui")


def setup_logging(debug: bool = False, verbose: bool = False) -> Optional[str]:
    """Configure logging. Debug implies verbose."""
    if not debug and not verbose:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    log_path = f"/tmp/wallabag_tui_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        filename=log_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    logger.info("Logging to %s (debug=%s)", log_path, debug)
    return log_path


@dataclass(frozen=True)
class ClientConfig:
    """Settings threaded into the synchronizer and the dispatcher."""

    wallabag_url: str
    client_id: str
    client_secret: str
    username: str
    password: str
    entries_per_api_call: int = DEFAULT_ENTRIES_PER_API_CALL
    default_unread: bool = True
    default_starred: bool = False
    default_public: bool = False
    sort_field: str = "created"
    sort_order: str = "desc"
    cache_path: str = CACHE_PATH
    debug: bool = False

    def table_options(self) -> TableOptions:
        return TableOptions(
            filters=TableFilters(
                unread=self.default_unread,
                starred=self.default_starred,
                public=self.default_public,
            ),
            sorts=TableSorts(field=self.sort_field, order=self.sort_order),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any], debug: bool = False) -> ClientConfig:
        if not isinstance(data, dict):
            raise ConfigError("Config must be a JSON object")
        missing = [key for key in REQUIRED_KEYS if not data.get(key)]
        if missing:
            raise ConfigError(f"Missing config keys: {', '.join(missing)}")
        for key in REQUIRED_KEYS + ("cache_path",):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ConfigError(f"{key} must be a string, got {data[key]!r}")
        flags = {key: data.get(key, default) for key, default in FLAG_DEFAULTS.items()}
        for key, value in flags.items():
            if not isinstance(value, bool):
                raise ConfigError(f"{key} must be true or false, got {value!r}")

        per_call = data.get("entries_per_api_call", DEFAULT_ENTRIES_PER_API_CALL)
        if isinstance(per_call, bool) or not isinstance(per_call, int) or per_call < 1:
            raise ConfigError(f"entries_per_api_call must be a positive integer, got {per_call!r}")

        sort_field = data.get("sort_field", "created")
        if sort_field not in SORT_FIELDS:
            raise ConfigError(f"sort_field must be one of {', '.join(SORT_FIELDS)}")
        sort_order = data.get("sort_order", "desc")
        if sort_order not in SORT_ORDERS:
            raise ConfigError(f"sort_order must be one of {', '.join(SORT_ORDERS)}")

        return cls(
            wallabag_url=data["wallabag_url"].rstrip("/"),
            client_id=data["client_id"],
            client_secret=data["client_secret"],
            username=data["username"],
            password=data["password"],
            entries_per_api_call=per_call,
            default_unread=flags["default_unread"],
            default_starred=flags["default_starred"],
            default_public=flags["default_public"],
            sort_field=sort_field,
            sort_order=sort_order,
            cache_path=os.path.expanduser(data.get("cache_path") or CACHE_PATH),
            debug=debug,
        )


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load the main configuration file."""
    path = os.path.expanduser(path)
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "r") as f:
            config = json.load(f)
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        raise ConfigError(f"Failed to load config from {path}: {e}") from e
    if not isinstance(config, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    logger.info("Loaded config from %s", path)
    return config


def load_client_config(path: str = CONFIG_PATH, debug: bool = False) -> ClientConfig:
    return ClientConfig.from_dict(load_config(path), debug=debug)
