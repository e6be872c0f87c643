# -*- coding: utf-8 -*-
"""Client state that survives between sessions on the same device."""
from __future__ import annotations

import json
import logging
import os
import typing as t
from pathlib import Path


logger = logging.getLogger(__name__)

ONBOARDING_SEEN_KEY = "rocky-onboarding-seen"


def default_state_file() -> Path:
    override = os.getenv("ROCKY_STATE_FILE")
    if override:
        return Path(override)
    base = os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "rocky" / "state.json"


class Preferences:
    """A small JSON key/value file."""

    def __init__(self, path: t.Optional[Path] = None) -> None:
        self.path = Path(path) if path else default_state_file()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default=None):
        return self._read().get(key, default)

    def set(self, key: str, value) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    @property
    def has_seen_onboarding(self) -> bool:
        return bool(self.get(ONBOARDING_SEEN_KEY, False))

    def mark_onboarding_seen(self) -> None:
        self.set(ONBOARDING_SEEN_KEY, True)
