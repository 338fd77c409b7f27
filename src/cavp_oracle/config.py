# -*- coding: utf-8 -*-
"""
RU: Конфигурация оракула с профилями политики длины AEAD тега.
EN: Oracle configuration with AEAD tag-length policy profiles.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Final, FrozenSet, Optional

logger = logging.getLogger(__name__)

# NIST SP 800-38D: допустимые длины тега GCM в байтах
SP800_38D_TAG_LENGTHS: Final[FrozenSet[int]] = frozenset({4, 8, 12, 13, 14, 15, 16})

_FULL_TAG_LENGTH: Final[int] = 16
_DEFAULT_CONFIG_FILE: Final[str] = "cavp_oracle.json"


class OracleProfile(str, Enum):
    """Predefined tag-length policies."""

    # CAVP GCM vectors: every SP 800-38D tag length
    CAVP = "cavp"

    # Full-length tags only
    FULL_TAG = "full_tag"


@dataclass(frozen=True)
class OracleConfig:
    """
    Oracle configuration parameters.

    Attributes:
        gcm_tag_lengths: Tag lengths (bytes) the AES-GCM primitive accepts.
        default_tag_length: Tag length used when a seal request leaves it unset.
        warn_on_legacy: Log a warning when DES/2-key 3DES/RC4 are exercised.

    Examples:
        >>> OracleConfig.from_profile(OracleProfile.FULL_TAG).gcm_tag_lengths
        frozenset({16})

        >>> cfg = OracleConfig(gcm_tag_lengths=frozenset({12, 16}), default_tag_length=12)
        >>> cfg.default_tag_length
        12
    """

    gcm_tag_lengths: FrozenSet[int] = field(default=SP800_38D_TAG_LENGTHS)
    default_tag_length: int = _FULL_TAG_LENGTH
    warn_on_legacy: bool = True

    def __post_init__(self) -> None:
        """Validate parameters."""
        if not self.gcm_tag_lengths:
            raise ValueError("gcm_tag_lengths must not be empty")
        if any(n < 4 or n > _FULL_TAG_LENGTH for n in self.gcm_tag_lengths):
            raise ValueError("gcm_tag_lengths must lie within 4..16 bytes")
        if self.default_tag_length not in self.gcm_tag_lengths:
            raise ValueError("default_tag_length must be one of gcm_tag_lengths")

    @staticmethod
    def from_profile(profile: OracleProfile) -> "OracleConfig":
        """
        Create configuration from predefined profile.

        Args:
            profile: Tag-length policy profile.

        Returns:
            OracleConfig instance.
        """
        return _PROFILE_PARAMS[profile]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OracleConfig":
        """
        Build configuration from a JSON-style mapping.

        Recognised keys: ``profile``, ``gcm_tag_lengths``,
        ``default_tag_length``, ``warn_on_legacy``. Explicit keys
        override the profile values.

        Raises:
            ValueError: on unknown profile or invalid values.
            TypeError: on wrong value types.
        """
        base = cls.from_profile(OracleProfile(data.get("profile", OracleProfile.CAVP.value)))

        tag_lengths = data.get("gcm_tag_lengths")
        if tag_lengths is not None and not isinstance(tag_lengths, list):
            raise TypeError("gcm_tag_lengths must be a list of integers")

        warn = data.get("warn_on_legacy", base.warn_on_legacy)
        if not isinstance(warn, bool):
            raise TypeError("warn_on_legacy must be a boolean")

        return cls(
            gcm_tag_lengths=(
                frozenset(int(n) for n in tag_lengths)
                if tag_lengths is not None
                else base.gcm_tag_lengths
            ),
            default_tag_length=int(data.get("default_tag_length", base.default_tag_length)),
            warn_on_legacy=warn,
        )


# Predefined profiles
_PROFILE_PARAMS: Final[dict[OracleProfile, OracleConfig]] = {
    OracleProfile.CAVP: OracleConfig(),
    OracleProfile.FULL_TAG: OracleConfig(gcm_tag_lengths=frozenset({_FULL_TAG_LENGTH})),
}

DEFAULT_CONFIG: Final[OracleConfig] = _PROFILE_PARAMS[OracleProfile.CAVP]


def load_config(config_path: Optional[Path] = None) -> OracleConfig:
    """
    Load oracle configuration from a JSON file or fall back to defaults.

    Args:
        config_path: Path to the JSON file. If None, the ``CAVP_ORACLE_CONFIG``
            environment variable is used, then ``cavp_oracle.json`` in the
            current directory.

    Returns:
        OracleConfig. Missing files, invalid JSON and invalid values are
        logged as warnings and yield the default configuration.
    """
    if config_path is None:
        config_path = Path(os.environ.get("CAVP_ORACLE_CONFIG", _DEFAULT_CONFIG_FILE))

    if not config_path.exists():
        logger.info(f"Config file {config_path} not found, using defaults")
        return DEFAULT_CONFIG

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = json.load(f)

        if not isinstance(user_config, dict):
            raise ValueError(
                f"config file must contain a JSON object, "
                f"got {type(user_config).__name__}"
            )

        config = OracleConfig.from_dict(user_config)
        logger.info(f"Config loaded from {config_path}")
        logger.debug(f"Config: {config}")
        return config

    except json.JSONDecodeError as e:
        logger.warning(
            f"Could not parse {config_path}: invalid JSON at line {e.lineno}, "
            f"column {e.colno}. Using defaults."
        )
    except OSError as e:
        logger.warning(f"Could not read {config_path}: {e}. Using defaults.")
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid config values in {config_path}: {e}. Using defaults.")

    return DEFAULT_CONFIG


__all__ = [
    "SP800_38D_TAG_LENGTHS",
    "OracleProfile",
    "OracleConfig",
    "DEFAULT_CONFIG",
    "load_config",
]
