"""Configuration management for openwebclient.

Configuration Discovery Precedence (Highest to Lowest Priority):
===============================================================

1. **OPENWEBCLIENT_CONFIG_DIR Environment Variable** (Highest Priority)
   - Looks for: `${OPENWEBCLIENT_CONFIG_DIR}/openwebclient.yaml`
   - Use case: Development, testing, custom deployments

2. **~/.openwebclient Directory** (Fallback)
   - Looks for: `~/.openwebclient/openwebclient.yaml`
   - Use case: Default user installations

If no `openwebclient.yaml` is found, default configuration is applied.
Individual settings from the file can be overridden with `OPENWEBCLIENT_*`
environment variables (e.g. `OPENWEBCLIENT_TIMEOUT=10`).

Example openwebclient.yaml:
--------
openwebclient:
  base_url: https://api.example.com
  timeout: 10
  headers:
    Accept: application/json
  hooks:
    - myproject.hooks.log_request
    - hook: openwebclient.hooks.header
      params: {name: X-Trace, value: "1"}
    - hook: openwebclient.hooks.raise_for_status
      on: response
"""

import importlib
import logging
import os
import threading
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "openwebclient.yaml"

# YAML file read by WebClientConfig.from_yaml, as the lowest-priority source
_yaml_path: ContextVar[Path | None] = ContextVar("openwebclient_yaml_path", default=None)


class HookConfig:
    """Configuration for a single hook with optional parameters."""

    def __init__(
        self,
        hook_path: str,
        params: dict[str, Any] | None = None,
        on: str = "request",
        once: bool = False,
    ) -> None:
        """Initialize a hook configuration.

        Args:
            hook_path: Python import path to a handler or a handler factory
            params: Keyword arguments for the factory
            on: Chain to attach to ("request" or "response")
            once: Attach as a one-time hook
        """
        if on not in ("request", "response"):
            raise ValueError(f"Hook 'on' must be 'request' or 'response', got {on!r}")
        self.hook_path = hook_path
        self.params = params
        self.on = on
        self.once = once

    def create_handler(self) -> Any:
        """Import the hook and return the handler to attach.

        The import path names a factory, called with params to produce the
        handler, when params is given or the target is marked with
        @hook_factory (all of openwebclient.hooks is). Otherwise the target
        is the handler itself.

        Raises:
            ImportError: If the module cannot be imported
            AttributeError: If the module has no such attribute
        """
        module_path, name = self.hook_path.rsplit(".", 1)
        module = importlib.import_module(module_path)
        target = getattr(module, name)

        if self.params is not None or getattr(target, "_hook_factory", False):
            return target(**(self.params or {}))
        return target

    def __repr__(self) -> str:
        return f"HookConfig({self.hook_path!r}, on={self.on!r}, once={self.once})"


class WebClientConfig(BaseSettings):
    """Main configuration for openwebclient, read from openwebclient.yaml."""

    model_config = SettingsConfigDict(
        env_prefix="OPENWEBCLIENT_",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Passed to httpx.Client
    base_url: str = ""
    timeout: float = 5.0
    follow_redirects: bool = False
    headers: dict[str, str] = Field(default_factory=dict)
    user_agent: str | None = None

    # Hook configurations (import paths or dicts with hook/params/on/once)
    hooks: list[str | dict[str, Any]] = Field(default_factory=list)

    config_path: Path | None = None

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for httpx.Client."""
        headers = dict(self.headers)
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return {
            "base_url": self.base_url,
            "timeout": self.timeout,
            "follow_redirects": self.follow_redirects,
            "headers": headers,
        }

    def load_hooks(self) -> list[tuple[HookConfig, Any]]:
        """Parse hook entries and resolve their handlers, skipping broken ones.

        Returns:
            (HookConfig, handler) for each valid entry, in configuration order
        """
        loaded: list[tuple[HookConfig, Any]] = []
        for entry in self.hooks:
            try:
                if isinstance(entry, str):
                    hook_config = HookConfig(entry)
                elif isinstance(entry, dict):
                    hook_path = entry.get("hook", "")
                    if not hook_path:
                        logger.error(f"Hook entry missing 'hook' key: {entry}")
                        continue
                    hook_config = HookConfig(
                        hook_path,
                        params=entry.get("params"),
                        on=entry.get("on", "request"),
                        once=bool(entry.get("once", False)),
                    )
                else:
                    logger.error(f"Invalid hook entry type: {type(entry)}")
                    continue

                handler = hook_config.create_handler()
            except (ImportError, AttributeError, ValueError, TypeError) as e:
                logger.error(f"Failed to load hook {entry}: {e}")
                continue

            if not callable(handler):
                logger.error(f"Hook {hook_config.hook_path} resolved to non-callable {type(handler).__name__}")
                continue

            loaded.append((hook_config, handler))
            logger.debug(f"Loaded hook: {hook_config}")
        return loaded

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order sources: init kwargs > environment > .env > secrets > YAML file."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
            YamlSectionSource(settings_cls, _yaml_path.get()),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path, **kwargs: Any) -> "WebClientConfig":
        """Load configuration from the openwebclient section of a YAML file.

        File values are the lowest priority: OPENWEBCLIENT_* environment
        variables override them, and kwargs override both.

        Args:
            yaml_path: Path to openwebclient.yaml
            **kwargs: Settings taking precedence over the file and environment

        Returns:
            WebClientConfig instance (defaults if the file does not exist)
        """
        token = _yaml_path.set(yaml_path)
        try:
            return cls(config_path=yaml_path, **kwargs)
        finally:
            _yaml_path.reset(token)


class YamlSectionSource(PydanticBaseSettingsSource):
    """Settings source reading the openwebclient section of a YAML file."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self.yaml_path = yaml_path

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        # Values are provided all at once by __call__
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        if self.yaml_path is None or not self.yaml_path.exists():
            return {}

        with self.yaml_path.open() as f:
            raw = yaml.safe_load(f) or {}
        section = (raw.get("openwebclient") or {}) if isinstance(raw, dict) else None
        if not isinstance(section, dict):
            logger.warning(f"Invalid openwebclient section in {self.yaml_path}: {type(section)}")
            return {}

        fields = self.settings_cls.model_fields
        return {k: v for k, v in section.items() if k in fields}


# Global configuration instance
_config_instance: WebClientConfig | None = None
_config_lock = threading.Lock()


def get_config() -> WebClientConfig:
    """Get the configuration instance."""
    global _config_instance

    if _config_instance is None:
        with _config_lock:
            # Double-check locking pattern
            if _config_instance is None:
                env_config_dir = os.environ.get("OPENWEBCLIENT_CONFIG_DIR")
                if env_config_dir:
                    config_dir = Path(env_config_dir)
                    logger.info(f"Using config directory from environment: {config_dir}")
                else:
                    config_dir = Path.home() / ".openwebclient"

                yaml_path = config_dir / CONFIG_FILENAME
                if yaml_path.exists():
                    logger.info(f"Loading openwebclient config from: {yaml_path}")
                    _config_instance = WebClientConfig.from_yaml(yaml_path)
                else:
                    logger.info(f"{CONFIG_FILENAME} not found at {yaml_path}, using default config")
                    _config_instance = WebClientConfig()

    return _config_instance


def set_config_instance(config: WebClientConfig) -> None:
    """Set the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = config


def clear_config_instance() -> None:
    """Clear the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = None
