"""Configuration management for the character builder."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


DEFAULT_CLASS_NAMES = [
    "barbarian",
    "bard",
    "cleric",
    "druid",
    "fighter",
    "monk",
    "paladin",
    "ranger",
    "rogue",
    "sorcerer",
    "warlock",
    "wizard",
]


class DataFilesConfig(BaseModel):
    """Reference document file names, relative to the data root."""

    races: str = "races.json"
    spells: str = "spells/spells-phb.json"
    items: str = "items.json"
    base_items: str = "items-base.json"
    feats: str = "feats.json"
    backgrounds: str = "backgrounds.json"
    skills: str = "skills.json"
    conditions: str = "conditionsdiseases.json"
    bestiary: str = "bestiary/bestiary-phb.json"
    variant_rules: str = "variantrules.json"
    actions: str = "actions.json"
    book: str = "book/book-phb.json"
    optional_features: str = "optionalfeatures.json"
    senses: str = "senses.json"
    class_pattern: str = "class/class-{name}.json"


class DataConfig(BaseModel):
    """Reference data configuration."""

    root: Path = Path("./data")
    files: DataFilesConfig = Field(default_factory=DataFilesConfig)
    class_names: list[str] = Field(default_factory=lambda: list(DEFAULT_CLASS_NAMES))
    source: str = "PHB"

    def class_file(self, class_name: str) -> str:
        """Get the document file name for a class."""
        return self.files.class_pattern.format(name=class_name.lower())


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 4000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class AppConfig(BaseModel):
    """Main application configuration."""

    data: DataConfig = Field(default_factory=DataConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Path | str | None = None) -> AppConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to ./config.yaml

    Returns:
        AppConfig instance with loaded or default values
    """
    if config_path is None:
        config_path = Path("config.yaml")
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return AppConfig(**data)

    return AppConfig()


def save_config(config: AppConfig, config_path: Path | str | None = None) -> None:
    """Save configuration to YAML file.

    Args:
        config: AppConfig instance to save
        config_path: Path to save to. Defaults to ./config.yaml
    """
    if config_path is None:
        config_path = Path("config.yaml")
    else:
        config_path = Path(config_path)

    data = config.model_dump()
    # Path objects are not YAML-serializable
    data["data"]["root"] = str(data["data"]["root"])

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global config instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global configuration instance.

    Returns:
        The loaded AppConfig instance
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Path | str | None = None) -> AppConfig:
    """Reload configuration from disk.

    Args:
        config_path: Path to config file

    Returns:
        Newly loaded AppConfig instance
    """
    global _config
    _config = load_config(config_path)
    return _config
