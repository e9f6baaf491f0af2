"""Global constants for the display hub."""

import os
from pathlib import Path

# Root of the persistent store (plugins/ and data/ live under it)
_data_dir_env = os.getenv("HUB_DATA_DIR", "")
DATA_ROOT = Path(_data_dir_env).resolve() if _data_dir_env else Path.cwd()

PLUGINS_DIR = DATA_ROOT / "plugins"                  # plugins/<name>/{meta.json,script.js}
STYLE_FILE = DATA_ROOT / "data" / "style.css"        # the single custom stylesheet

META_FILE = "meta.json"
SCRIPT_FILE = "script.js"

# Timeout for fetching remote meta/script/style (seconds)
FETCH_TIMEOUT = float(os.getenv("HUB_FETCH_TIMEOUT", "10"))

# Served paths referenced in broadcast payloads
SCRIPT_URL_TEMPLATE = "/script/{}.js"
STYLE_URL = "/custom/style.css"

# Synthetic config injected at position 0 of every plugin
ENABLED_CONFIG_NAME = "enabled"
ENABLED_CONFIG_TYPE = "checkbox"

DEFAULT_HOST = os.getenv("HUB_HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "3012"))
