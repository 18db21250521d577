from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import configparser
from typing import Optional


@dataclass(frozen=True)
class Bin2IsoConfig:
    # Fail on a trailing partial sector instead of dropping it with a warning.
    strict_alignment: bool = False
    check_modes: bool = True
    overwrite: bool = True

    log_interval_s: float = 2.0

    @staticmethod
    def _parse_float(s: str) -> Optional[float]:
        v = (s or "").strip()
        if not v:
            return None
        try:
            return float(v)
        except ValueError:
            return None

    @staticmethod
    def _get_bool(cfg: configparser.ConfigParser, section: str, key: str, default: bool) -> bool:
        try:
            return cfg.getboolean(section, key, fallback=default)
        except ValueError:
            return bool(default)

    @classmethod
    def load(cls, path: str | Path) -> "Bin2IsoConfig":
        p = Path(path)
        if not p.exists():
            return cls()

        parser = configparser.ConfigParser(interpolation=None)
        parser.read(p, encoding="utf-8")

        strict = cls._get_bool(parser, "Convert", "strict_alignment", cls.strict_alignment)
        check_modes = cls._get_bool(parser, "Convert", "check_modes", cls.check_modes)
        overwrite = cls._get_bool(parser, "Convert", "overwrite", cls.overwrite)

        interval = cls._parse_float(parser.get("Convert", "log_interval_s", fallback=""))
        if interval is None:
            interval = cls.log_interval_s
        interval = max(0.0, min(3600.0, interval))

        return cls(
            strict_alignment=strict,
            check_modes=check_modes,
            overwrite=overwrite,
            log_interval_s=interval,
        )


def default_config_path() -> Path:
    return Path("pybin2iso.ini")
