import json
import os
from pathlib import Path
from typing import Any, Dict, Optional
from system.log_utils import debug, info, warn, error

# --- Preference Keys ---
VALID_PREF_KEYS = [
        "bucket_minutes",
        "preload_offset_seconds",
        "reveal_offset_seconds",
        "anticipation_seconds",
        "interval_view_seconds",
        "cumulative_view_seconds",
        "force_phase",
        "sales_source_url",
        "use_mock_data",
        "metric",
        "primary_branch",
        "fetch_timeout",
        "log_level",
    ]

KEY_BUCKET_MINUTES          = VALID_PREF_KEYS[0]
KEY_PRELOAD_OFFSET_SECONDS  = VALID_PREF_KEYS[1]
KEY_REVEAL_OFFSET_SECONDS   = VALID_PREF_KEYS[2]
KEY_ANTICIPATION_SECONDS    = VALID_PREF_KEYS[3]
KEY_INTERVAL_VIEW_SECONDS   = VALID_PREF_KEYS[4]
KEY_CUMULATIVE_VIEW_SECONDS = VALID_PREF_KEYS[5]
KEY_FORCE_PHASE             = VALID_PREF_KEYS[6]
KEY_SALES_SOURCE_URL        = VALID_PREF_KEYS[7]
KEY_USE_MOCK_DATA           = VALID_PREF_KEYS[8]
KEY_METRIC                  = VALID_PREF_KEYS[9]
KEY_PRIMARY_BRANCH          = VALID_PREF_KEYS[10]
KEY_FETCH_TIMEOUT           = VALID_PREF_KEYS[11]
KEY_LOG_LEVEL               = VALID_PREF_KEYS[12]

DEFAULTS: Dict[str, Any] = {
    KEY_BUCKET_MINUTES          : 10,
    KEY_PRELOAD_OFFSET_SECONDS  : 30,
    KEY_REVEAL_OFFSET_SECONDS   : 60,
    KEY_ANTICIPATION_SECONDS    : 10,
    KEY_INTERVAL_VIEW_SECONDS   : 30,
    KEY_CUMULATIVE_VIEW_SECONDS : 30,
    KEY_FORCE_PHASE             : None,
    KEY_SALES_SOURCE_URL        : "http://127.0.0.1:8890/api/sales",
    KEY_USE_MOCK_DATA           : False,
    KEY_METRIC                  : "gmv",
    KEY_PRIMARY_BRANCH          : "cdon",
    KEY_FETCH_TIMEOUT           : 20,
    KEY_LOG_LEVEL               : "INFO",
}

PREFS_FILE_ENV = "SALESBOARD_PREFS"
DEFAULT_PREFS_FILE = "config/board_prefs.json"


class Preferences:
    """
    JSON-based deployment configuration.
    Loaded once at startup; values are not mutated at runtime.
    """

    def __init__(self, filename: Optional[str] = None):
        if filename is None:
            filename = os.environ.get(PREFS_FILE_ENV, DEFAULT_PREFS_FILE)
        self.file = Path(filename)
        self.data: Dict[str, Any] = {}
        self._load()

        # Fill in anything the file does not set
        missing = [k for k in VALID_PREF_KEYS if k not in self.data]
        for k in missing:
            self.data[k] = DEFAULTS[k]

        if not self.file.exists():
            self.save()

    # ------------------------------------------------------------------
    # Core file ops
    # ------------------------------------------------------------------

    def _load(self):
        if not self.file.exists():
            warn(f"[PREFS] file not found, will create {self.file}")
            self.data = {}
            return
        try:
            with open(self.file, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            error(f"[PREFS] load failed: {e}")
            self.data = {}
            return

        if not isinstance(loaded, dict):
            error(f"[PREFS] expected a JSON object in {self.file}, using defaults")
            self.data = {}
            return

        unknown = [k for k in loaded if k not in VALID_PREF_KEYS]
        if unknown:
            warn(f"[PREFS] ignoring unknown keys: {unknown}")
        self.data = {k: v for k, v in loaded.items() if k in VALID_PREF_KEYS}
        info(f"[PREFS] loaded {len(self.data)} keys from {self.file}")

    def save(self):
        """Write the effective configuration back to disk."""
        try:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.file, "w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2)
            debug(f"[PREFS] saved {self.file}")
        except OSError as e:
            error(f"[PREFS] save failed: {e}")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self.data.get(key, default))
        except (TypeError, ValueError):
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        try:
            return float(self.data.get(key, default))
        except (TypeError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.data.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes", "on")
        return bool(value)

    def override(self, key: str, value: Any) -> None:
        """Startup-only override (command line), never persisted."""
        if key not in VALID_PREF_KEYS:
            raise KeyError(key)
        self.data[key] = value

    # ------------------------------------------------------------------

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.data)
