"""Display configuration store."""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Union

from .exceptions import ConfigError
from .models import DisplayConfig

logger = logging.getLogger(__name__)

ConfigListener = Callable[[DisplayConfig], None]


class ConfigStore:
    """
    Holds the current DisplayConfig and tells subscribers when it changes.

    ``on_config_change`` is the write-back entry point used by the mode
    control; listeners run synchronously, in subscription order.
    """

    def __init__(self, config: Optional[DisplayConfig] = None) -> None:
        self._config = config or DisplayConfig()
        self._listeners: List[ConfigListener] = []

    @property
    def config(self) -> DisplayConfig:
        return self._config

    def subscribe(self, callback: ConfigListener) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def on_config_change(self, config: DisplayConfig) -> None:
        if config == self._config:
            return
        self._config = config
        for cb in list(self._listeners):
            cb(config)

    def update(self, **changes: Any) -> DisplayConfig:
        """Replace individual fields, e.g. ``store.update(heat_opacity=0.5)``."""
        try:
            config = dataclasses.replace(self._config, **changes)
        except TypeError as e:
            raise ConfigError(f"Invalid config field: {e}") from e
        self.on_config_change(config)
        return config

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "ConfigStore":
        return cls(DisplayConfig.from_options(options))

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "ConfigStore":
        """Load panel options saved as a JSON object."""
        p = Path(path)
        try:
            payload = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read display options from {p}: {e}") from e
        if not isinstance(payload, dict):
            raise ConfigError(f"{p}: expected a JSON object, got {type(payload).__name__}")
        logger.debug("loaded display options from %s", p)
        return cls.from_options(payload)
