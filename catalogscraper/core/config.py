from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional
import keyring
from keyring.errors import KeyringError
from urllib.parse import urlparse

from catalogscraper.core.errors import ConfigError
from catalogscraper.core.logging import log
from catalogscraper.utils.file_io import safe_read_json, safe_write_json


@dataclass(frozen=True)
class SiteConfig:
    """Settings for one run, built once at startup and passed to each component."""
    site_url: str
    token: str
    debug: bool = False
    headless: bool = True
    log_dir: Optional[Path] = None


class ConfigManager:
    """Loads the site configuration, keeping the session token in the system keyring."""

    APP_NAME = "catalogscraper"
    CONFIG_DIR = Path.home() / f".{APP_NAME}"
    CONFIG_FILE = CONFIG_DIR / "config.json"
    LOCAL_CONFIG_FILE = Path("config.json")
    SERVICE_NAME = "catalogscraper"

    # Accepted spellings for each setting, first match wins
    KEY_ALIASES = {
        "site_url": ("siteUrl", "site_url"),
        "token": ("token",),
        "debug": ("debug",),
        "headless": ("headless",),
        "log_dir": ("logDir", "log_dir"),
    }

    @classmethod
    def _key_name(cls, site_url: str) -> str:
        return f"{urlparse(site_url).netloc}_token"

    @classmethod
    def resolve_path(cls, path: Optional[Path] = None) -> Path:
        """Pick the config file: explicit path, then ./config.json, then the user config dir."""
        if path:
            return Path(path)
        if cls.LOCAL_CONFIG_FILE.exists():
            return cls.LOCAL_CONFIG_FILE
        return cls.CONFIG_FILE

    @classmethod
    def _pick(cls, data: Dict[str, Any], name: str, default: Any = None) -> Any:
        for key in cls.KEY_ALIASES[name]:
            if key in data and data[key] not in (None, ""):
                return data[key]
        return default

    @classmethod
    def load_raw(cls, path: Optional[Path] = None) -> Dict[str, Any]:
        return safe_read_json(cls.resolve_path(path), default={})

    @classmethod
    def load_config(cls, path: Optional[Path] = None) -> SiteConfig:
        """Build the run configuration from the config file and the keyring."""
        config_path = cls.resolve_path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}. Run 'catalogscraper setup' first.")

        data = safe_read_json(config_path, default={})
        site_url = cls._pick(data, "site_url")
        if not site_url:
            raise ConfigError(f"'siteUrl' is missing from {config_path}")
        site_url = cls.validate_url(site_url)

        token = cls._pick(data, "token") or cls.get_token(site_url)
        if not token:
            raise ConfigError(
                f"No session token for {site_url}. Add 'token' to {config_path} or run 'catalogscraper login'."
            )

        log_dir = cls._pick(data, "log_dir")
        return SiteConfig(
            site_url=site_url,
            token=token,
            debug=bool(cls._pick(data, "debug", False)),
            headless=bool(cls._pick(data, "headless", True)),
            log_dir=Path(log_dir) if log_dir else None,
        )

    @classmethod
    def save_config(cls, config: Dict[str, Any], path: Optional[Path] = None) -> bool:
        """Save the config file, moving the token into the keyring. Returns whether a token was stored."""
        config_path = Path(path) if path else cls.CONFIG_FILE

        if not safe_write_json(config_path, {k: v for k, v in config.items() if k != "token"}):
            raise ConfigError(f"Could not write {config_path}")

        token = config.get("token")
        return bool(token) and cls.save_token(config["siteUrl"], token)

    @classmethod
    def save_token(cls, site_url: str, token: str) -> bool:
        """Store a session token securely."""
        try:
            keyring.set_password(cls.SERVICE_NAME, cls._key_name(site_url), token)
        except KeyringError as e:
            log(f"Keyring save failed for {site_url}: {e}", level="error")
            return False
        return True

    @classmethod
    def get_token(cls, site_url: str) -> Optional[str]:
        """Retrieve a session token securely."""
        try:
            return keyring.get_password(cls.SERVICE_NAME, cls._key_name(site_url))
        except KeyringError as e:
            log(f"Keyring retrieval failed for {site_url}: {e}", level="error")
            return None

    @staticmethod
    def validate_url(url: str) -> str:
        """Check for an http(s) URL with a host and drop any trailing slash."""
        parsed = urlparse(url)
        if not (parsed.scheme in ("http", "https") and parsed.netloc):
            raise ConfigError(f"Invalid siteUrl: '{url}' - Must be http/https with a valid domain.")
        return url.rstrip("/")
