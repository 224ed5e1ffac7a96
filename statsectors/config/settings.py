"""
Configuration management for the statsectors converter.
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")


class NamespacesConfig(BaseModel):
    """RDF namespaces and identifier prefixes."""

    nis: str = "http://geo.belgif.org/nis2011/"
    nuts: str = "http://nuts.geovocab.org/id/"
    ramon: str = "http://ec.europa.eu/eurostat/ramon/ontologies/geographic.rdf#"
    spatial: str = "http://geovocab.org/spatial#"


class ContainmentLinkConfig(BaseModel):
    """One spatial:PP link, built from a single attribute of the feature."""

    attribute: str
    namespace: str
    normalize: bool = False
    suffix: str = ""


def _default_links() -> list[ContainmentLinkConfig]:
    ns = NamespacesConfig()
    return [
        ContainmentLinkConfig(attribute="Nuts3_new", namespace=ns.nuts),
        ContainmentLinkConfig(attribute="Nis_012011", namespace=ns.nis, normalize=True),
    ]


class AttributesConfig(BaseModel):
    """Names of the attributes read from the dataset.

    Defaults match the 2011 statistical sectors shapefile
    (Cs012011, Nis_012011, Sector_nl, Sector_fr, Nuts3_new, ...).
    """

    sector_code: str = "Cs012011"
    # language tag -> attribute, in emission order
    labels: dict[str, str] = Field(
        default_factory=lambda: {"nl": "Sector_nl", "fr": "Sector_fr"}
    )
    containment: list[ContainmentLinkConfig] = Field(default_factory=_default_links)


class IdentifiersConfig(BaseModel):
    """Identifier construction options."""

    suffix: str = "#id"
    percent_encode: bool = False  # False: reject values that break the IRI


class InputConfig(BaseModel):
    """Input dataset options."""

    encoding: str = "UTF-8"
    layer: str | None = None


class OutputConfig(BaseModel):
    """Output configuration."""

    format: Literal["nt", "turtle", "xml", "json-ld", "n3"] = "nt"
    validate_graph: bool = True
    strict: bool = False


class PathsConfig(BaseModel):
    """Project paths configuration."""

    log_file: Path | None = None
    shapes_file: Path = Path(__file__).parent.parent / "shapes" / "sector_shapes.ttl"


class Settings(BaseSettings):
    """Main configuration class."""

    model_config = ConfigDict(
        env_prefix="STATSECTORS_",
        env_nested_delimiter="__",
    )

    namespaces: NamespacesConfig = Field(default_factory=NamespacesConfig)
    attributes: AttributesConfig = Field(default_factory=AttributesConfig)
    identifiers: IdentifiersConfig = Field(default_factory=IdentifiersConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment first: load_config() passes the YAML file as init kwargs
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def load_config(config_path: str | Path = DEFAULT_CONFIG_PATH) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Settings object with loaded configuration
    """
    config_file = Path(config_path)

    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}
    else:
        config_dict = {}

    # Create settings, which will also load from environment variables
    settings = Settings(**config_dict)

    return settings


# Global settings instance (CLI only; library code takes Settings explicitly)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings
