"""PiP Configuration - Single Authority for Browser and Selection Policy

Components read from here, never decide policy.

RESPONSIBILITY:
- Load pip.yaml
- Provide get() singleton
- Expose typed config values

DOES NOT:
- Make selection or activation decisions
- Manage sessions (BrowserSessionManager's job)
- Know about tools
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional, Literal, Tuple
from dataclasses import dataclass, replace


CONFIG_ENV_VAR = "PIP_ANYWHERE_CONFIG"


@dataclass(frozen=True)
class PipSettings:
    """Immutable configuration snapshot."""
    backend: Literal["playwright"]
    default_browser: Literal["chromium", "chrome", "edge", "firefox"]
    headless: bool
    user_data_dir: str  # "auto" | "isolated" | path
    timeout_ms: int
    min_ready_state: int  # HTMLMediaElement.readyState ordinal, 0..4
    exit_existing_pip: bool
    already_active: Literal["select", "succeed"]
    clear_disable_attribute: bool
    fallback_strategy: bool
    denylist_extra: Tuple[str, ...]
    log_level: str


def _as_entries(value: Any) -> Tuple[str, ...]:
    """denylist_extra as a tuple of non-empty strings.

    A single string is one entry, not a sequence of characters.
    """
    if not value:
        return ()
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, (list, tuple)):
        logging.warning(f"Ignoring denylist_extra of type {type(value).__name__}; expected a list")
        return ()
    return tuple(str(entry).strip() for entry in value if entry and str(entry).strip())


class PipConfig:
    """Singleton configuration authority.

    Usage:
        config = PipConfig.get()
        settings = config.settings
        threshold = settings.min_ready_state
    """

    _instance: Optional["PipConfig"] = None
    _settings: Optional[PipSettings] = None
    _path_override: Optional[Path] = None

    # Defaults (used if yaml missing or invalid)
    DEFAULTS = {
        "backend": "playwright",
        "default_browser": "chromium",
        "headless": False,
        "user_data_dir": "auto",
        "timeout_ms": 10000,
        "min_ready_state": 1,
        "exit_existing_pip": False,
        "already_active": "select",
        "clear_disable_attribute": True,
        "fallback_strategy": True,
        "denylist_extra": [],
        "log_level": "INFO",
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load()
        return cls._instance

    @classmethod
    def get(cls) -> "PipConfig":
        """Get singleton instance."""
        return cls()

    @classmethod
    def use_file(cls, path: Optional[str]) -> "PipConfig":
        """Point the singleton at an explicit config file and reload."""
        cls._path_override = Path(path) if path else None
        config = cls.get()
        config.reload()
        return config

    @property
    def settings(self) -> PipSettings:
        """Get current settings."""
        if self._settings is None:
            self._load()
        return self._settings

    def config_path(self) -> Path:
        """Resolve which pip.yaml to read."""
        if self._path_override is not None:
            return self._path_override
        env_path = os.getenv(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)
        return Path(__file__).parent.parent / "config" / "pip.yaml"

    def _load(self) -> None:
        """Load configuration from pip.yaml."""
        config_path = self.config_path()

        raw_config: Dict[str, Any] = {}

        if config_path.exists():
            try:
                import yaml
                with open(config_path, encoding="utf-8") as f:
                    full_config = yaml.safe_load(f) or {}
                    raw_config = full_config.get("pip", {}) or {}
                    logging.info(f"Loaded PiP config from {config_path}")
            except Exception as e:
                logging.warning(f"Failed to load {config_path.name}: {e}, using defaults")
        else:
            logging.info(f"No pip.yaml found at {config_path}, using defaults")

        # Merge with defaults
        merged = {**self.DEFAULTS, **raw_config}

        already_active = merged["already_active"]
        if already_active not in ("select", "succeed"):
            logging.warning(f"Unknown already_active policy '{already_active}', using 'select'")
            already_active = "select"

        self._settings = PipSettings(
            backend=merged["backend"],
            default_browser=merged["default_browser"],
            headless=bool(merged["headless"]),
            user_data_dir=str(merged["user_data_dir"]),
            timeout_ms=int(merged["timeout_ms"]),
            min_ready_state=max(0, min(4, int(merged["min_ready_state"]))),
            exit_existing_pip=bool(merged["exit_existing_pip"]),
            already_active=already_active,
            clear_disable_attribute=bool(merged["clear_disable_attribute"]),
            fallback_strategy=bool(merged["fallback_strategy"]),
            denylist_extra=_as_entries(merged["denylist_extra"]),
            log_level=str(merged["log_level"]).upper(),
        )

        logging.debug(f"PipConfig: {self._settings}")

    def override(self, **changes: Any) -> PipSettings:
        """Replace individual settings for this process (CLI flags)."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if changes:
            self._settings = replace(self.settings, **changes)
            logging.debug(f"PipConfig overridden: {changes}")
        return self._settings

    def reload(self) -> None:
        """Force reload configuration (for testing)."""
        self._load()
