import configparser
import os
from pathlib import Path
from typing import List, Optional


class ConfigLoader:
    def __init__(self, config_path=None):
        # project root sits two levels above dna_core/config/*
        self.project_root = Path(__file__).resolve().parents[2]
        self.config_path = Path(config_path) if config_path else self.project_root / "conf" / "settings.ini"

        self.config = configparser.ConfigParser()
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file missing: {self.config_path}")

        self.config.read(self.config_path, encoding="utf-8")

    def get(self, section, key, fallback=None):
        """Config value with user paths (~) expanded."""
        val = self.config.get(section, key, fallback=fallback)
        if val and "~" in val:
            return os.path.expanduser(val)
        return val

    def get_list(self, section, key) -> List[str]:
        """Comma- or newline-separated values, each expanded like get()."""
        raw = self.config.get(section, key, fallback="") or ""
        out: List[str] = []
        for part in raw.replace("\n", ",").split(","):
            part = part.strip()
            if part:
                out.append(os.path.expanduser(part))
        return out

    def resolve_path(self, section, key) -> Optional[Path]:
        """Relative paths are anchored at the project root."""
        val = self.get(section, key)
        if not val:
            return None
        p = Path(val)
        return p if p.is_absolute() else self.project_root / p


_config: Optional[ConfigLoader] = None


def get_config() -> Optional[ConfigLoader]:
    """Shared loader; None when conf/settings.ini is absent."""
    global _config
    if _config is None:
        try:
            _config = ConfigLoader()
        except FileNotFoundError:
            return None
    return _config
