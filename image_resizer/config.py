"""
Configuration management for the image resizer.

This module provides the ResizerConfig dataclass with validation, mapping
round-tripping and loading from environment variables.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from .processing import DEFAULT_BACKGROUND, NAMING_FLAT, NAMING_MODES

DEFAULT_SCALE = 2.0
ENV_PREFIX = "IMAGE_RESIZER_"


def _default_source_dir() -> Path:
    return Path.cwd() / "images"


def _default_dest_dir() -> Path:
    return Path.cwd() / "output"


@dataclass
class ResizerConfig:
    """
    Complete configuration for a resize or benchmark run.

    Paths default to ``images`` and ``output`` under the current working
    directory, resolved when the config is created.
    """

    source_dir: Union[str, Path] = field(default_factory=_default_source_dir)
    dest_dir: Union[str, Path] = field(default_factory=_default_dest_dir)
    scale: float = DEFAULT_SCALE

    # None picks a CPU-based pool size, 0 starts one worker per image
    max_workers: Optional[int] = None

    naming: str = NAMING_FLAT
    background: Tuple[int, int, int] = DEFAULT_BACKGROUND
    rounds: int = 1

    def __post_init__(self) -> None:
        """Validate and normalize configuration."""
        self.source_dir = Path(self.source_dir)
        self.dest_dir = Path(self.dest_dir)

        if isinstance(self.scale, bool) or not isinstance(self.scale, (int, float)):
            raise ValueError(f"scale must be numeric, got {self.scale!r}")
        self.scale = float(self.scale)
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise ValueError(f"scale must be positive and finite, got {self.scale}")

        if self.max_workers is not None:
            self.max_workers = _coerce_int(self.max_workers, "max_workers")
            if self.max_workers < 0:
                raise ValueError(
                    f"max_workers must be non-negative, got {self.max_workers}"
                )

        if self.naming not in NAMING_MODES:
            raise ValueError(
                f"Unsupported naming mode: {self.naming}. "
                f"Expected one of {list(NAMING_MODES)}"
            )

        self.background = _coerce_color(self.background)

        self.rounds = _coerce_int(self.rounds, "rounds")
        if self.rounds <= 0:
            raise ValueError(f"rounds must be positive, got {self.rounds}")

        if self.source_dir.resolve() == self.dest_dir.resolve():
            raise ValueError("source_dir and dest_dir must be different directories")

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, object] | None) -> "ResizerConfig":
        """
        Create configuration from dictionary.

        Args:
            config_dict: Configuration mapping (can be None)

        Returns:
            ResizerConfig instance
        """
        if not config_dict:
            return cls()

        allowed = {
            "source_dir",
            "dest_dir",
            "scale",
            "max_workers",
            "naming",
            "background",
            "rounds",
        }
        unexpected = set(config_dict) - allowed
        if unexpected:
            raise ValueError(
                f"Unsupported configuration keys provided: {sorted(unexpected)}"
            )

        return cls(**{key: config_dict[key] for key in allowed if key in config_dict})

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True,
    ) -> "ResizerConfig":
        """
        Create configuration from ``IMAGE_RESIZER_*`` environment variables.

        A ``.env`` file in the working directory is loaded first unless
        ``load_env_file`` is False or an explicit mapping is given.
        """
        if environ is None:
            if load_env_file:
                from dotenv import find_dotenv, load_dotenv

                load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ

        values: Dict[str, object] = {}
        for key in ("source_dir", "dest_dir", "naming"):
            raw = environ.get(ENV_PREFIX + key.upper())
            if raw:
                values[key] = raw

        numeric = {"scale": float, "max_workers": int, "rounds": int}
        for key, cast in numeric.items():
            raw = environ.get(ENV_PREFIX + key.upper())
            if raw:
                try:
                    values[key] = cast(raw)
                except ValueError as exc:
                    raise ValueError(
                        f"{ENV_PREFIX + key.upper()} must be a number, got {raw!r}"
                    ) from exc

        return cls.from_dict(values)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration
        """
        return {
            "source_dir": str(self.source_dir),
            "dest_dir": str(self.dest_dir),
            "scale": self.scale,
            "max_workers": self.max_workers,
            "naming": self.naming,
            "background": list(self.background),
            "rounds": self.rounds,
        }


def _coerce_int(value: object, name: str) -> int:
    """Reject non-integer values for integer fields."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


def _coerce_color(value: object) -> Tuple[int, int, int]:
    """Validate an RGB triple."""

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if len(value) == 3 and all(
            isinstance(channel, int) and 0 <= channel <= 255 for channel in value
        ):
            return (int(value[0]), int(value[1]), int(value[2]))
    raise ValueError("background must be three integers between 0 and 255")


__all__ = ["DEFAULT_SCALE", "ResizerConfig"]
