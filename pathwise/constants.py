"""
Constants for the Pathwise application.

Note: These constants serve as default fallback values.
Actual values can be overridden from .pathwise/config.json at runtime via ConfigManager.
"""
from pathlib import Path
from typing import Any, Optional
import json

from pathwise.exceptions import ConfigurationError

# =============================================================================
# Default Fallback Values
# These are used if config.json doesn't exist or doesn't specify a value.
# =============================================================================

# Progress bounds (not configurable)
PROGRESS_MIN = 0.0
PROGRESS_MAX = 100.0

# Progress given to a leaf whose status is set to in-progress while at zero
DEFAULT_NOMINAL_IN_PROGRESS_MINIMUM = 10.0

# Highest progress an in-progress override may keep; 100 would derive completed
IN_PROGRESS_MAXIMUM = 99.0

# Display defaults
DEFAULT_PERCENTAGE_ROUND_PRECISION = 0
DEFAULT_STATUS_HEADER_WIDTH = 25

# Store composite progress as whole numbers instead of raw means
DEFAULT_INTEGER_PROGRESS = False

# Child collection field of each composite level
CHILD_COLLECTION_FIELDS = ("phases", "steps", "tasks", "subtasks", "subjects", "chapters", "lectures")

# Validation error messages (not configurable)
VALIDATION_NAME_REQUIRED = "Name is required for all nodes."

# GATE import defaults
GATE_LECTURE_NAME_TEMPLATE = "Lecture {index}"
GATE_EMPTY_TIME_SPENT = "00:00:00:00"

# Display precision used when no config is consulted
PERCENTAGE_ROUND_PRECISION = DEFAULT_PERCENTAGE_ROUND_PRECISION


# =============================================================================
# Config Loader
# Load values from .pathwise/config.json at runtime.
# =============================================================================

_config_manager_instance: Optional['ConfigManager'] = None


class ConfigManager:
    """
    Manages loading configuration from a config.json file with fallback to defaults.

    Usage:
        # With default path (.pathwise/config.json)
        config = ConfigManager()
        minimum = config.get_float('nominal_in_progress_minimum', DEFAULT_NOMINAL_IN_PROGRESS_MINIMUM)

        # With custom path
        config = ConfigManager(config_path=Path("/custom/path/config.json"))
    """

    def __init__(self, config_path: Optional[Path] = None, config_dir: Optional[Path] = None) -> None:
        """
        Initialize ConfigManager.

        Args:
            config_path: Direct path to config.json file. Takes precedence over config_dir.
            config_dir: Path to .pathwise/ directory. Config path will be config_dir/config.json.
        """
        self._config: Optional[dict] = None

        if config_path is not None:
            self._config_path = config_path
        elif config_dir is not None:
            self._config_path = config_dir / "config.json"
        else:
            self._config_path = Path(".pathwise") / "config.json"

    def _load_config(self) -> dict:
        """Load config from config.json file."""
        if self._config is not None:
            return self._config

        if self._config_path.exists():
            try:
                with open(self._config_path, "r") as f:
                    loaded = json.load(f)
            except (json.JSONDecodeError, IOError):
                loaded = {}
            self._config = loaded if isinstance(loaded, dict) else {}
        else:
            self._config = {}

        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value with fallback to default.

        Args:
            key: Configuration key name.
            default: Default value if key not found.

        Returns:
            Config value or default.
        """
        config = self._load_config()
        return config.get(key, default)

    def get_int(self, key: str, default: int) -> int:
        """Get an integer config value with fallback."""
        value = self.get(key, default)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Config value '{key}' must be an integer, got {value!r}.")

    def get_float(self, key: str, default: float) -> float:
        """Get a float config value with fallback."""
        value = self.get(key, default)
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Config value '{key}' must be a number, got {value!r}.")

    def get_bool(self, key: str, default: bool) -> bool:
        """Get a boolean config value with fallback."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if value is None:
            return default
        raise ConfigurationError(f"Config value '{key}' must be true or false, got {value!r}.")

    def reload(self) -> dict:
        """Force reload of config from disk."""
        self._config = None
        return self._load_config()

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        return self._config_path


def get_config_manager(reset: bool = False) -> ConfigManager:
    """
    Get the singleton ConfigManager instance with default path.

    Args:
        reset: If True, reset the singleton and create a new instance.

    Returns:
        ConfigManager singleton instance.
    """
    global _config_manager_instance
    if _config_manager_instance is None or reset:
        _config_manager_instance = ConfigManager()
    return _config_manager_instance


def set_config_manager(manager: ConfigManager) -> None:
    """Install a specific ConfigManager as the singleton (used by the CLI --config flag)."""
    global _config_manager_instance
    _config_manager_instance = manager


def reset_config_manager() -> None:
    """Reset the singleton ConfigManager instance (useful for testing)."""
    global _config_manager_instance
    _config_manager_instance = None


# Convenience functions for common config access
def get_nominal_in_progress_minimum() -> float:
    """Get the in-progress override floor from config or default."""
    value = get_config_manager().get_float(
        'nominal_in_progress_minimum', DEFAULT_NOMINAL_IN_PROGRESS_MINIMUM
    )
    if not PROGRESS_MIN < value <= IN_PROGRESS_MAXIMUM:
        raise ConfigurationError(
            f"nominal_in_progress_minimum must be above {PROGRESS_MIN:g} and at most "
            f"{IN_PROGRESS_MAXIMUM:g}, got {value:g}."
        )
    return value


def get_percentage_round_precision() -> int:
    """Get percentage round precision from config or default."""
    return get_config_manager().get_int('percentage_round_precision', DEFAULT_PERCENTAGE_ROUND_PRECISION)


def get_integer_progress() -> bool:
    """Get whether composite progress is stored as whole numbers."""
    return get_config_manager().get_bool('integer_progress', DEFAULT_INTEGER_PROGRESS)


def get_status_header_width() -> int:
    """Get status header width from config or default."""
    return get_config_manager().get_int('status_header_width', DEFAULT_STATUS_HEADER_WIDTH)
