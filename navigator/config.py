"""
Configuration Management Module

Resolves navigator settings with environment variable priority.

Lookup order for every setting:
1. Environment variable (``.env`` is loaded at import time)
2. ``config.json`` in the working directory (``navigator`` section)
3. Built-in default
"""

import os
import json
from dotenv import load_dotenv

# Load environment variables from .env file at the start
load_dotenv()

CONFIG_PATH = "config.json"

# --- Data directory structure ---
DATA_DIR = "data"
PATTERNS_DIR = os.path.join(DATA_DIR, "patterns")
DEFAULT_PATTERN_STORE_FILE = os.path.join(PATTERNS_DIR, "url_patterns.json")

# --- Engine constants ---
PATTERN_CONFIDENCE_THRESHOLD = 0.6
MAX_PATTERN_CONFIDENCE = 0.95
LEARNED_PATTERN_SEED = 0.5
VALIDATED_PATTERN_SEED = 0.7
SCRAPING_CONFIDENCE = 0.3
SUCCESS_RATE_WEIGHT = 0.3

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

# (environment variable, config.json key, default, type)
_SETTINGS = {
    'validation_timeout': ('NAVIGATOR_VALIDATION_TIMEOUT', 'validation_timeout', 5.0, float),
    'validation_cache_ttl_ms': ('NAVIGATOR_VALIDATION_CACHE_TTL_MS', 'validation_cache_ttl_ms', HOUR_MS, int),
    'validator_workers': ('NAVIGATOR_VALIDATOR_WORKERS', 'validator_workers', 4, int),
    'scrape_timeout': ('NAVIGATOR_SCRAPE_TIMEOUT', 'scrape_timeout', 30.0, float),
    'scrape_max_bytes': ('NAVIGATOR_SCRAPE_MAX_BYTES', 'scrape_max_bytes', 5 * 1024 * 1024, int),
    'scrape_attempts': ('NAVIGATOR_SCRAPE_ATTEMPTS', 'scrape_attempts', 2, int),
    'nav_links_cache_ttl_ms': ('NAVIGATOR_NAV_LINKS_CACHE_TTL_MS', 'nav_links_cache_ttl_ms', DAY_MS, int),
    'response_cache_ttl_ms': ('NAVIGATOR_RESPONSE_CACHE_TTL_MS', 'response_cache_ttl_ms', DAY_MS, int),
    'cache_max_entries': ('NAVIGATOR_CACHE_MAX_ENTRIES', 'cache_max_entries', 1000, int),
    'confidence_threshold': ('NAVIGATOR_CONFIDENCE_THRESHOLD', 'confidence_threshold', PATTERN_CONFIDENCE_THRESHOLD, float),
    'pattern_store_path': ('NAVIGATOR_PATTERN_STORE', 'pattern_store_path', DEFAULT_PATTERN_STORE_FILE, str),
    'pattern_max_age_days': ('NAVIGATOR_PATTERN_MAX_AGE_DAYS', 'pattern_max_age_days', 90, int),
    'user_agent': ('NAVIGATOR_USER_AGENT', 'user_agent', DEFAULT_USER_AGENT, str),
}


def get_config_value(key, default=None):
    """Get a value from the ``navigator`` section of config.json with fallback to default."""
    if os.path.exists(CONFIG_PATH):
        try:
            with open(CONFIG_PATH, 'r', encoding='utf-8') as f:
                config = json.load(f)
                return config.get('navigator', {}).get(key, default)
        except (json.JSONDecodeError, IOError):
            pass
    return default


def get_setting(name):
    """Resolve a single navigator setting.

    Returns:
        tuple: (value, source) where source is 'environment variable', 'config file' or 'default'
    """
    env_var, config_key, default, cast = _SETTINGS[name]

    # 1. Check environment variable first (highest priority)
    raw = os.getenv(env_var)
    if raw not in (None, ""):
        try:
            return cast(raw), "environment variable"
        except ValueError:
            print(f"Warning: Ignoring invalid value for {env_var}: {raw!r}")

    # 2. Check config file
    value = get_config_value(config_key)
    if value is not None:
        try:
            return cast(value), "config file"
        except (TypeError, ValueError):
            print(f"Warning: Ignoring invalid '{config_key}' in {CONFIG_PATH}: {value!r}")

    # 3. Fall back to the default
    return default, "default"


def load_navigator_config():
    """Load every navigator setting into a plain dict."""
    return {name: get_setting(name)[0] for name in _SETTINGS}


def show_config_status():
    """Describe where each setting was resolved from, for debugging."""
    lines = []
    for name in _SETTINGS:
        value, source = get_setting(name)
        lines.append(f"{name} = {value!r} ({source})")
    return "\n".join(lines)
