"""Library configuration and the YAML settings file used by the CLI."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import structlog
import yaml

from kayako_client.exceptions import UninitializedConfiguration
from kayako_client.transport import RESTClient, RESTTransport

logger = structlog.get_logger()

SETTINGS_DIR_NAME = ".kayako-client"


def normalize_base_url(base_url: str) -> str:
    """Strip a trailing ``*.php`` script and any query, end with a single slash."""
    path = urlsplit(base_url).path
    script = path.rsplit("/", 1)[-1]
    if script.lower().endswith(".php"):
        base_url = base_url[: base_url.find(script)]
    base_url = base_url.split("?", 1)[0]
    return base_url.rstrip("/") + "/"


@dataclass
class TicketDefaults:
    """Values applied to tickets built with ``Ticket.create_new``."""

    status_id: int | None = None
    priority_id: int | None = None
    type_id: int | None = None
    auto_create_user: bool = True


class MemoCache:
    """Explicit in-memory cache bound to one configuration.

    Entries live until invalidated; nothing expires on its own, so a
    long-running process should invalidate entries it needs fresh.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def get_or_load(self, key: str, loader: Callable[[], Any], reload: bool = False) -> Any:
        if reload or key not in self._entries:
            logger.debug("Loading cache entry", key=key, reload=reload)
            self._entries[key] = loader()
        return self._entries[key]

    def invalidate(self, key: str | None = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class Config:
    """Settings needed to talk to a Kayako REST API endpoint.

    A configuration is passed explicitly to finders and factories; every
    object keeps a reference to the configuration it was created with.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        secret_key: str,
        *,
        datetime_format: str = "%Y-%m-%d %H:%M:%S",
        date_format: str = "%Y-%m-%d",
        standard_url_type: bool = True,
        debug: bool = False,
        timeout: float = 30.0,
        transport: RESTTransport | None = None,
        ticket_defaults: TicketDefaults | None = None,
    ) -> None:
        """Initialize client configuration.

        Args:
            base_url: Base URL of the REST API (``index.php`` is stripped)
            api_key: REST API key
            secret_key: REST API secret key used for request signatures
            datetime_format: Default strftime format of datetime getters
            date_format: Default strftime format of date getters
            standard_url_type: True for ``index.php?/Module/...`` URLs, False for ``index.php?e=/Module/...``
            debug: True to log every request and response
            timeout: HTTP timeout in seconds
            transport: Transport to use instead of the default :class:`RESTClient`
            ticket_defaults: Status, priority and type applied to new tickets
        """
        self.base_url = normalize_base_url(base_url) if base_url else ""
        self.api_key = api_key
        self.secret_key = secret_key
        self.datetime_format = datetime_format
        self.date_format = date_format
        self.standard_url_type = standard_url_type
        self.debug = debug
        self.timeout = timeout
        self.ticket_defaults = ticket_defaults or TicketDefaults()
        self.cache = MemoCache()
        self._transport = transport

    @property
    def transport(self) -> RESTTransport:
        """Return the transport, creating the default REST client on first use."""
        if self._transport is None:
            missing = [name for name in ("base_url", "api_key", "secret_key") if not getattr(self, name)]
            if missing:
                raise UninitializedConfiguration(
                    f"Kayako client is not configured, missing: {', '.join(missing)}. "
                    "Set them using:\n  kayako config set <key> <value>"
                )
            self._transport = RESTClient(self)
        return self._transport

    @transport.setter
    def transport(self, transport: RESTTransport) -> None:
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: "SettingsFile") -> "Config":
        """Build a configuration from a settings file.

        Raises:
            UninitializedConfiguration: If URL or credentials are not set
        """
        values = settings.list()
        missing = [key for key in ("base_url", "api_key", "secret_key") if not values.get(key)]
        if missing:
            raise UninitializedConfiguration(
                f"Kayako client is not configured, missing: {', '.join(missing)}. "
                "Set them using:\n  kayako config set <key> <value>"
            )
        options: dict[str, Any] = {}
        for key in ("datetime_format", "date_format"):
            if values.get(key):
                options[key] = str(values[key])
        if "standard_url_type" in values:
            options["standard_url_type"] = str(values["standard_url_type"]).lower() in ("1", "true", "yes")
        if "debug" in values:
            options["debug"] = str(values["debug"]).lower() in ("1", "true", "yes")
        if values.get("timeout"):
            options["timeout"] = float(values["timeout"])
        return cls(str(values["base_url"]), str(values["api_key"]), str(values["secret_key"]), **options)

    def __repr__(self) -> str:
        return f"Config(base_url={self.base_url!r}, api_key={self.api_key!r})"


class SettingsFile:
    """Settings stored in a YAML file.

    Supports both local (repository-level) and global (user-level) settings.
    Local settings are stored in .kayako-client/config.yaml in the current directory.
    Global settings are stored in ~/.kayako-client/config.yaml.

    When reading, values are looked up in local settings first, then global settings.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize the settings file.

        Args:
            use_global: If True, use global settings only. If False, use local settings with global fallback.
            config_dir: Custom directory to store the settings file (overrides use_global)
        """
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = Path.home() / SETTINGS_DIR_NAME
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / SETTINGS_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"
        self._settings: dict[str, Any] = self._load(self.config_file)

        self._global_settings: dict[str, Any] = {}
        if not self.is_global and config_dir is None:
            global_file = Path.home() / SETTINGS_DIR_NAME / "config.yaml"
            if global_file.exists() and global_file != self.config_file:
                self._global_settings = self._load(global_file)

        logger.debug("Settings initialized", config_file=str(self.config_file), is_global=self.is_global)

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        """Load settings from a YAML file.

        Returns:
            Settings dictionary, empty if the file does not exist
        """
        if not path.exists():
            logger.debug("Settings file does not exist", path=str(path))
            return {}

        try:
            with open(path, "r") as f:
                settings = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load settings", path=str(path), error=str(e))
            raise ValueError(f"Failed to load settings from {path}: {e}") from e

        if not isinstance(settings, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")
        logger.debug("Settings loaded", path=str(path), keys=list(settings.keys()))
        return settings

    def _save(self) -> None:
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._settings, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error("Failed to save settings", error=str(e))
            raise ValueError(f"Failed to save settings to {self.config_file}: {e}") from e
        logger.debug("Settings saved", config_file=str(self.config_file))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting, falling back to global settings for local files."""
        if key in self._settings:
            return self._settings[key]
        if not self.is_global and key in self._global_settings:
            return self._global_settings[key]
        return default

    def set(self, key: str, value: Any) -> None:
        logger.debug("Setting value", key=key)
        self._settings[key] = value
        self._save()

    def unset(self, key: str) -> None:
        logger.debug("Unsetting value", key=key)
        if key in self._settings:
            del self._settings[key]
            self._save()

    def list(self) -> dict[str, Any]:
        """List all settings; local values take precedence over global ones."""
        if self.is_global:
            return self._settings.copy()
        merged = self._global_settings.copy()
        merged.update(self._settings)
        return merged


def get_settings(use_global: bool = False) -> SettingsFile:
    return SettingsFile(use_global=use_global)
