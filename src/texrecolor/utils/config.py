"""Configuration management for texrecolor."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field

from .logging import get_logger

logger = get_logger(__name__)

COLOR_SPACES = ("rgb", "hsv", "lab")

# Settings read verbatim from the environment, never coerced to numbers
STRING_ENV_KEYS = frozenset(
    {
        "replacement.color_space",
        "processing.mode",
        "processing.algorithm",
        "palettes.config_path",
        "palettes.personal_table",
        "output.directory",
    }
)


class ProcessingConfig(BaseModel):
    """Settings for a batch recoloring run."""

    mode: Literal["category", "random"] = "category"
    algorithm: Literal["replacement", "hue_shift"] = "replacement"
    workers: int = Field(default=4, ge=1)
    seed: Optional[int] = None
    max_bundles: Optional[int] = Field(default=None, ge=1)
    texture_filter: str = "_col"


class ConfigManager:
    """Manage configuration settings for texrecolor."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path) if config_path else None
        self._config = self.get_default_config()

        if self.config_path and self.config_path.exists():
            self.load_config()

    def get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "replacement": {
                "replacement_strength": 0.8,
                "luminance_preservation": 0.7,
                "saturation_preservation": 0.5,
                "minimum_color_distance": 0.1,
                "color_space": "lab",
                "preserve_gradients": True,
            },
            "processing": {
                "mode": "category",
                "algorithm": "replacement",
                "workers": 4,
                "seed": None,
                "max_bundles": None,
                "texture_filter": "_col",
            },
            "palettes": {
                "config_path": None,
                "personal_table": None,
                "default_category": "normal",
            },
            "output": {
                "directory": "./output",
            },
        }

    def load_config(self) -> None:
        """Load configuration from file."""
        if not self.config_path or not self.config_path.exists():
            return

        try:
            with open(self.config_path, "r") as f:
                if self.config_path.suffix.lower() in (".yaml", ".yml"):
                    loaded_config = yaml.safe_load(f)
                else:
                    loaded_config = json.load(f)

            if loaded_config:
                self._config = self._deep_merge(self._config, loaded_config)
            logger.debug(f"Loaded configuration from {self.config_path}")

        except Exception as e:
            raise ValueError(
                f"Failed to load configuration from {self.config_path}: {e}"
            ) from e

    def save_config(self, output_path: Optional[Union[str, Path]] = None) -> None:
        """Save current configuration to file.

        Args:
            output_path: Optional output path, defaults to current config_path
        """
        save_path = Path(output_path) if output_path else self.config_path

        if not save_path:
            raise ValueError("No output path specified")

        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, "w") as f:
            if save_path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(self._config, f, default_flow_style=False, indent=2)
            else:
                json.dump(self._config, f, indent=2)

    def get_config(self) -> Dict[str, Any]:
        """Get current configuration."""
        return self._config.copy()

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self._config

        try:
            for k in key.split("."):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def update(self, updates: Dict[str, Any]) -> None:
        """Update configuration with dictionary of changes.

        Args:
            updates: Dictionary of configuration updates
        """
        self._config = self._deep_merge(self._config, updates)

    def _deep_merge(self, base: Dict, update: Dict) -> Dict:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get_replacement_parameters(self):
        """Get replacement parameters built from the ``replacement`` section."""
        from ..color.types import ColorSpace, ReplacementParameters

        section = self.get("replacement", {})
        return ReplacementParameters(
            replacement_strength=section.get("replacement_strength", 0.8),
            luminance_preservation=section.get("luminance_preservation", 0.7),
            saturation_preservation=section.get("saturation_preservation", 0.5),
            minimum_color_distance=section.get("minimum_color_distance", 0.1),
            color_space=ColorSpace(str(section.get("color_space", "lab")).lower()),
            preserve_gradients=section.get("preserve_gradients", True),
        )

    def get_processing_config(self) -> ProcessingConfig:
        """Get processing settings as a validated model."""
        return ProcessingConfig(**self.get("processing", {}))

    @classmethod
    def from_env(cls, config_path: Optional[Union[str, Path]] = None) -> "ConfigManager":
        """Create configuration manager with environment variable overrides."""
        config_manager = cls(config_path)

        env_mappings = {
            "TEXRECOLOR_STRENGTH": "replacement.replacement_strength",
            "TEXRECOLOR_COLOR_SPACE": "replacement.color_space",
            "TEXRECOLOR_MODE": "processing.mode",
            "TEXRECOLOR_ALGORITHM": "processing.algorithm",
            "TEXRECOLOR_WORKERS": "processing.workers",
            "TEXRECOLOR_SEED": "processing.seed",
            "TEXRECOLOR_PALETTE_CONFIG": "palettes.config_path",
            "TEXRECOLOR_PERSONAL_TABLE": "palettes.personal_table",
            "TEXRECOLOR_OUTPUT_DIR": "output.directory",
        }

        for env_var, config_key in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                if config_key not in STRING_ENV_KEYS:
                    value = _coerce_env_value(value)
                config_manager.set(config_key, value)

        return config_manager

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        replacement = self.get("replacement", {})
        for name in (
            "replacement_strength",
            "luminance_preservation",
            "saturation_preservation",
            "minimum_color_distance",
        ):
            value = replacement.get(name, 0)
            if not isinstance(value, (int, float)) or not 0 <= value <= 1:
                errors.append(f"replacement.{name} must be between 0 and 1")

        if str(replacement.get("color_space", "lab")).lower() not in COLOR_SPACES:
            errors.append(f"replacement.color_space must be one of {', '.join(COLOR_SPACES)}")

        processing = self.get("processing", {})

        if processing.get("mode") not in ("category", "random"):
            errors.append("processing.mode must be 'category' or 'random'")

        if processing.get("algorithm") not in ("replacement", "hue_shift"):
            errors.append("processing.algorithm must be 'replacement' or 'hue_shift'")

        workers = processing.get("workers", 1)
        if not isinstance(workers, int) or workers <= 0:
            errors.append("processing.workers must be positive")

        max_bundles = processing.get("max_bundles")
        if max_bundles is not None and (not isinstance(max_bundles, int) or max_bundles <= 0):
            errors.append("processing.max_bundles must be positive")

        return len(errors) == 0, errors

    def get_profile_configs(self) -> Dict[str, Dict]:
        """Get predefined configuration profiles."""
        return {
            "gentle": {
                "replacement": {
                    "replacement_strength": 0.5,
                    "luminance_preservation": 0.9,
                    "saturation_preservation": 0.7,
                },
            },
            "balanced": {
                "replacement": {
                    "replacement_strength": 0.8,
                    "luminance_preservation": 0.7,
                    "saturation_preservation": 0.5,
                },
            },
            "vivid": {
                "replacement": {
                    "replacement_strength": 1.0,
                    "luminance_preservation": 0.5,
                    "saturation_preservation": 0.2,
                    "minimum_color_distance": 0.2,
                },
            },
        }

    def apply_profile(self, profile_name: str) -> None:
        """Apply a predefined configuration profile.

        Args:
            profile_name: Name of profile to apply
        """
        profiles = self.get_profile_configs()

        if profile_name not in profiles:
            raise ValueError(
                f"Unknown profile: {profile_name}. Available: {list(profiles.keys())}"
            )

        self.update(profiles[profile_name])


def _coerce_env_value(value: str) -> Any:
    """Convert an environment string to int, float or bool where possible."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        if "." in value:
            return float(value)
        if value.lstrip("-").isdigit():
            return int(value)
    except ValueError:
        pass  # Keep as string
    return value
