"""Configuration model for the notification handler."""

from pathlib import Path
import json
from dataclasses import dataclass, field

from ..events.event import DEFAULT_ERROR_ID, DEFAULT_EVENT_ID, DEFAULT_EXCEPTION_ID
from ..exceptions import ConfigurationError


@dataclass
class EventIdConfig:
    """Default event IDs used when a producer gives none."""
    generic: str = DEFAULT_EVENT_ID
    error: str = DEFAULT_ERROR_ID
    exception: str = DEFAULT_EXCEPTION_ID


@dataclass
class ConsoleConfig:
    """Configuration for the console output listener."""
    stderr: bool = False
    show_data: bool = True


@dataclass
class HandlerConfig:
    """Main configuration model."""
    default_ids: EventIdConfig = field(default_factory=EventIdConfig)
    console: ConsoleConfig = field(default_factory=ConsoleConfig)
    chain_global_hooks: bool = True

    @classmethod
    def default(cls) -> "HandlerConfig":
        """Create a default configuration."""
        return cls()


def _dataclass_to_dict(obj):
    """Convert dataclass to dict recursively."""
    from dataclasses import is_dataclass, asdict
    if is_dataclass(obj):
        return {key: _dataclass_to_dict(value) for key, value in asdict(obj).items()}
    elif isinstance(obj, dict):
        return {key: _dataclass_to_dict(value) for key, value in obj.items()}
    else:
        return obj


def _dict_to_dataclass(data, dataclass_type):
    """Convert dict to dataclass recursively."""
    from dataclasses import is_dataclass, fields
    if not is_dataclass(dataclass_type):
        return data
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping for {dataclass_type.__name__}, got {type(data).__name__}"
        )

    known = {f.name: f.type for f in fields(dataclass_type)}
    unknown = set(data) - set(known)
    if unknown:
        raise ConfigurationError(
            f"Unknown {dataclass_type.__name__} option(s): {', '.join(sorted(unknown))}"
        )

    kwargs = {}
    for field_name, field_type in known.items():
        if field_name in data:
            if hasattr(field_type, '__dataclass_fields__'):
                kwargs[field_name] = _dict_to_dataclass(data[field_name], field_type)
            else:
                kwargs[field_name] = data[field_name]

    return dataclass_type(**kwargs)


def load_config(config_path: Path) -> HandlerConfig:
    """Load configuration from JSON file."""
    try:
        with open(config_path, 'r') as f:
            config_data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read configuration {config_path}: {e}") from e

    return _dict_to_dataclass(config_data, HandlerConfig)


def save_config(config: HandlerConfig, config_path: Path) -> None:
    """Save configuration to JSON file."""
    config_dict = _dataclass_to_dict(config)

    with open(config_path, 'w') as f:
        json.dump(config_dict, f, indent=2)


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    save_config(HandlerConfig.default(), config_path)
