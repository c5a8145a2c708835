# movizen/config.py

import configparser
import logging
import math
import os
import sys
from typing import Any

# --- Constants ---
MIN_SEARCH_QUERY_LENGTH = 3
DEFAULT_DEBOUNCE_SECONDS = 0.3
DEFAULT_PERSISTENCE_FILE = "watchlist.json"
WATCHLIST_SLOT = "watchlist"
SEARCH_RESULTS_LIMIT = 10
OMDB_BASE_URL = "http://www.omdbapi.com/"
OMDB_DEFAULT_TIMEOUT = 10.0

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)
logging.getLogger("httpx").setLevel(logging.WARNING)


def get_configuration() -> (
    tuple[str, list[int], dict[str, Any], dict[str, Any]]
):
    """
    Reads the bot token, allowed IDs, OMDb and watchlist settings from the
    config.ini file.
    """
    config_path = "config.ini"
    if not os.path.exists(config_path):
        logger.critical(
            f"Configuration file '{config_path}' not found. Please create it."
        )
        sys.exit(1)

    config = configparser.ConfigParser()
    with open(config_path, encoding="utf-8") as f:
        config.read_string(f.read())

    token = config.get("telegram", "bot_token", fallback=None)
    if not token or token == "PLACE_TOKEN_HERE":
        logger.critical(f"Bot token not found or not set in '{config_path}'.")
        sys.exit(1)

    allowed_ids_str = config.get("telegram", "allowed_user_ids", fallback="")
    allowed_ids = (
        [int(id.strip()) for id in allowed_ids_str.split(",") if id.strip()]
        if allowed_ids_str
        else []
    )

    omdb_config = _load_omdb_config(config)
    if not omdb_config.get("api_key"):
        logger.info(
            "No OMDb API key configured. Movie lookups are disabled; titles must be entered manually."
        )

    watchlist_config = _load_watchlist_config(config)

    return token, allowed_ids, omdb_config, watchlist_config


def _parse_positive_number(raw: str, option: str) -> float:
    """Parses a strictly positive number, naming the option on failure."""
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"'{option}' must be a number, got {raw!r}.")
    if not math.isfinite(value):
        raise ValueError(f"'{option}' must be a finite number, got {raw!r}.")
    if value <= 0:
        raise ValueError(f"'{option}' must be greater than zero, got {raw!r}.")
    return value


def _load_omdb_config(config: configparser.ConfigParser) -> dict[str, Any]:
    """Loads the OMDb configuration. An unusable API key leaves lookups disabled."""
    omdb_config: dict[str, Any] = {
        "api_key": None,
        "base_url": OMDB_BASE_URL,
        "timeout": OMDB_DEFAULT_TIMEOUT,
    }
    if not config.has_section("omdb"):
        return omdb_config

    api_key = config.get("omdb", "api_key", fallback="").strip()
    if api_key and api_key != "YOUR_OMDB_API_KEY":
        omdb_config["api_key"] = api_key
        logger.info("[CONFIG] OMDb configuration loaded successfully.")

    base_url = config.get("omdb", "base_url", fallback="").strip()
    if base_url:
        omdb_config["base_url"] = base_url

    timeout = config.get("omdb", "timeout", fallback="").strip()
    if timeout:
        omdb_config["timeout"] = _parse_positive_number(timeout, "timeout")

    return omdb_config


def _load_watchlist_config(config: configparser.ConfigParser) -> dict[str, Any]:
    """
    Loads the persistence file location and the search debounce window.

    Both settings are optional; the persistence path has '~' expanded.
    """
    persistence_file = config.get(
        "watchlist", "persistence_file", fallback=DEFAULT_PERSISTENCE_FILE
    ).strip()
    persistence_file = os.path.expanduser(persistence_file or DEFAULT_PERSISTENCE_FILE)

    debounce_seconds = DEFAULT_DEBOUNCE_SECONDS
    debounce_ms = config.get("watchlist", "debounce_ms", fallback="").strip()
    if debounce_ms:
        debounce_seconds = _parse_positive_number(debounce_ms, "debounce_ms") / 1000

    logger.info(f"[CONFIG] Watchlist will be stored in '{persistence_file}'.")
    return {
        "persistence_file": persistence_file,
        "debounce_seconds": debounce_seconds,
    }
