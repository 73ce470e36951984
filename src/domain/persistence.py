"""Persistence helpers for reading and writing mixer settings documents."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .models import MixSettings


class MixSettingsSerializer:
    """Serialize :class:`MixSettings` instances to/from JSON-compatible dicts."""

    @staticmethod
    def to_dict(settings: MixSettings) -> Dict[str, Any]:
        return settings.model_dump(mode="json")

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> MixSettings:
        return MixSettings.model_validate(payload)


class MixSettingsFileAdapter:
    """Filesystem adapter that persists settings documents under a base path."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path

    def save(self, settings: MixSettings, filename: str = "mix_settings.json") -> Path:
        """Write the settings to ``base_path / filename`` and return the path."""

        destination = self.base_path / filename
        destination.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps(MixSettingsSerializer.to_dict(settings), indent=2)
        destination.write_text(data, encoding="utf-8")
        return destination

    def load(self, filename: str = "mix_settings.json") -> MixSettings:
        """Load the settings stored at ``base_path / filename``."""

        source = self.base_path / filename
        payload = json.loads(source.read_text(encoding="utf-8"))
        return MixSettingsSerializer.from_dict(payload)

    def load_or_default(self, filename: str = "mix_settings.json") -> MixSettings:
        """Return stored settings, or defaults when none have been saved yet."""

        if not (self.base_path / filename).exists():
            return MixSettings()
        return self.load(filename)
