from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Callable, List, Optional
from pokerun.core.logging import logger, LEVELS

SETTINGS_FILENAME = ".pokerun_settings.json"

@dataclass
class SettingsData:
    text_speed: int = 2            # 0 instant, 1 fast, 2 normal, 3 slow
    log_level: str = "INFO"        # DEBUG / INFO / WARN / ERROR
    debug: bool = False            # [Run]/[RewardResolver] trace tags
    rng_seed: Optional[int] = None # Fixed seed for reproducible runs

    def normalize(self):
        if self.text_speed not in {0,1,2,3}:
            self.text_speed = 2
        if isinstance(self.log_level, str):
            self.log_level = self.log_level.upper()
        if self.log_level not in LEVELS:
            self.log_level = "INFO"
        self.debug = bool(self.debug)
        if self.rng_seed is not None:
            try:
                self.rng_seed = int(self.rng_seed)
            except (TypeError, ValueError):
                self.rng_seed = None

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path
        self._listeners: List[Callable[[SettingsData], None]] = []

    @classmethod
    def _resolve_path(cls) -> Path:
        home = Path(os.path.expanduser("~"))
        if home.is_dir() and os.access(home, os.W_OK):
            return home / SETTINGS_FILENAME
        return Path.cwd() / SETTINGS_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        path = Path(path) if path is not None else cls._resolve_path()
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                if not isinstance(raw, dict):
                    raise ValueError("settings root must be an object")
                # Backfill missing fields (migration safe)
                field_names = {f.name for f in fields(SettingsData)}
                data = SettingsData(**{k: v for k, v in raw.items() if k in field_names})
                data.normalize()
                logger.debug("SettingsLoaded", path=str(path))
                return cls(data, path)
            except (OSError, ValueError, TypeError) as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        data = SettingsData()
        data.normalize()
        return cls(data, path)

    def save(self):
        try:
            self.path.write_text(json.dumps(asdict(self.data), indent=2), encoding="utf-8")
            logger.debug("SettingsSaved", path=str(self.path))
        except OSError as e:
            logger.error("SettingsSaveFailed", error=str(e))

    def update(self, **changes):
        """Apply field changes, normalize, persist and notify listeners."""
        for key, value in changes.items():
            if not hasattr(self.data, key):
                logger.warn("SettingsUnknownField", field=key)
                continue
            setattr(self.data, key, value)
        self.data.normalize()
        self.apply_log_level()
        self.save()
        self._notify()

    def apply_log_level(self):
        logger.set_level(self.data.log_level)  # type: ignore[arg-type]

    def on_change(self, fn: Callable[[SettingsData], None]):
        self._listeners.append(fn)

    def _notify(self):
        for fn in self._listeners:
            fn(self.data)
