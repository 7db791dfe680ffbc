import os
import yaml
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .exceptions import ConfigurationError

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

# Environment variable -> Settings field
ENV_VARS = {
    "BASE_URL": "base_url",
    "API_URL": "api_url",
    "BROWSER": "browser",
    "HEADLESS": "headless",
    "SLOW_MO": "slow_mo",
    "VIEWPORT_WIDTH": "viewport_width",
    "VIEWPORT_HEIGHT": "viewport_height",
    "TIMEOUT": "timeout",
    "WORKERS": "workers",
    "RETRIES": "retries",
    "TAGS": "tags",
    "LOG_LEVEL": "log_level",
    "CI": "is_ci",
    "RECORD_VIDEO": "record_video",
    "CAPTURE_SCREENSHOTS": "capture_screenshots",
    "DEBUG": "debug_mode",
}

# Flags that are on unless explicitly set to "false"
_DEFAULT_ON_FLAGS = {"headless", "capture_screenshots"}


@dataclass(frozen=True)
class Settings:
    """Immutable framework settings, resolved once per process"""
    base_url: str = "https://example.com"
    api_url: str = "https://api.example.com"

    browser: str = "chromium"
    headless: bool = True
    slow_mo: int = 0
    viewport_width: int = 1280
    viewport_height: int = 720

    timeout: int = 30000
    navigation_timeout: int = 30000
    action_timeout: int = 30000

    workers: int = 4
    retries: int = 2
    tags: str = "@smoke"

    log_level: str = "info"
    is_ci: bool = False

    record_video: bool = False
    capture_screenshots: bool = True
    debug_mode: bool = False

    reports_dir: str = "reports"

    @property
    def viewport(self) -> Dict[str, int]:
        """Viewport in the shape Playwright expects"""
        return {"width": self.viewport_width, "height": self.viewport_height}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 config_path: Optional[Path] = None) -> "Settings":
        """
        Resolve settings from defaults, an optional YAML file and the environment.

        Args:
            environ: Environment mapping, defaults to os.environ
            config_path: YAML file overriding defaults; BDD_E2E_CONFIG if omitted

        Returns:
            Frozen Settings instance
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        path = config_path or _default_config_path(environ)
        if path is not None and path.exists():
            values.update(_load_yaml(path))

        for env_name, field_name in ENV_VARS.items():
            raw = environ.get(env_name)
            if raw is None or raw == "":
                continue
            values[field_name] = raw

        # TIMEOUT drives navigation and action timeouts unless set on their own
        if "timeout" in values:
            values.setdefault("navigation_timeout", values["timeout"])
            values.setdefault("action_timeout", values["timeout"])

        return cls(**_coerce(values))

    def validate(self) -> None:
        """Raise ConfigurationError for values Playwright cannot use"""
        if self.browser not in SUPPORTED_BROWSERS:
            raise ConfigurationError(
                f"Unsupported browser: {self.browser} (expected one of {', '.join(SUPPORTED_BROWSERS)})"
            )
        if self.workers < 1:
            raise ConfigurationError(f"WORKERS must be at least 1, got {self.workers}")
        if self.retries < 0:
            raise ConfigurationError(f"RETRIES must not be negative, got {self.retries}")


def _default_config_path(environ: Mapping[str, str]) -> Optional[Path]:
    """Get configuration file path, if any"""
    if env_path := environ.get("BDD_E2E_CONFIG"):
        return Path(env_path)

    for location in (Path.cwd() / "bdd-e2e.yaml", Path.cwd() / "config" / "bdd-e2e.yaml"):
        if location.exists():
            return location

    return None


def _load_yaml(path: Path) -> Dict[str, Any]:
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {path}")

    known = {f.name for f in fields(Settings)}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")

    # An empty key means unset, except tags where it means "run everything"
    if data.get("tags", "") is None:
        data["tags"] = ""
    return {name: value for name, value in data.items() if value is not None}


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert raw string values to the field types declared on Settings"""
    types = {f.name: f.type for f in fields(Settings)}
    result = {}

    for name, value in values.items():
        expected = types[name]
        if expected in (bool, "bool"):
            result[name] = _to_bool(name, value)
        elif expected in (int, "int"):
            try:
                result[name] = int(value)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid integer for {name}: {value!r}")
        else:
            result[name] = str(value)

    return result


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if name in _DEFAULT_ON_FLAGS:
        return text != "false"
    return text == "true"


# Named run profiles: overrides applied on top of resolved settings
PROFILES: Dict[str, Dict[str, Any]] = {
    "default": {},
    "smoke": {"tags": "@smoke"},
    "regression": {"tags": "@regression"},
    "ci": {"workers": 1},
}


def apply_profile(settings: Settings, name: str) -> Settings:
    """Return settings with the named profile's overrides applied"""
    if name not in PROFILES:
        raise ConfigurationError(f"Unknown profile: {name} (expected one of {', '.join(PROFILES)})")
    return replace(settings, **PROFILES[name])
