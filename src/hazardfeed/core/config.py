"""
Configuration management for HazardFeed.
"""

from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from ruamel.yaml import YAML


class AdapterSet(str, Enum):
    """Named selection of active alert sources."""

    MOCK = "mock"
    NASA_LIVE = "nasa-live"
    FIRMS = "firms"
    USGS = "usgs"
    GDACS = "gdacs"
    ALL = "all"

    @classmethod
    def parse(cls, value: str) -> "AdapterSet":
        """Parse a selector name, raising ValueError for unknown names."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown adapter set {value!r} (expected one of: {valid})") from None


class SourceConfig(BaseModel):
    """Settings shared by every HTTP backed source."""

    url: str = Field(..., description="Feed URL")
    timeout: float = Field(20.0, description="HTTP request timeout in seconds")
    user_agent: str = Field("HazardFeed", description="User agent for feed requests")


class UsgsConfig(SourceConfig):
    """USGS earthquake catalog settings."""

    url: str = Field(
        "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/all_day.geojson",
        description="GeoJSON summary feed",
    )


class FirmsConfig(SourceConfig):
    """NASA FIRMS active fire settings."""

    url: str = Field(
        "https://firms.modaps.eosdis.nasa.gov/api/area/csv/{api_key}/{product}/{area}/{day_range}",
        description="CSV area API URL template",
    )
    product: str = Field("VIIRS_SNPP_NRT", description="Satellite product")
    area: str = Field("world", description="Area: 'world' or a west,south,east,north box")
    day_range: int = Field(1, description="Number of days to request (1-10)")
    max_requests: int = Field(10, description="Requests allowed per rate-limit window")
    window_seconds: int = Field(600, description="Rate-limit window length in seconds")


class GdacsConfig(SourceConfig):
    """GDACS disaster bulletin settings."""

    url: str = Field("https://www.gdacs.org/xml/rss.xml", description="RSS feed URL")


class EonetConfig(SourceConfig):
    """NASA EONET open event settings."""

    url: str = Field("https://eonet.gsfc.nasa.gov/api/v3/events", description="Events endpoint")
    status: str = Field("open", description="Event status filter")
    limit: int = Field(20, description="Maximum number of events")


class SyntheticConfig(BaseModel):
    """Offline synthetic source settings."""

    latency_seconds: float = Field(0.0, description="Simulated fetch latency")


class AggregatorConfig(BaseModel):
    """Aggregation settings."""

    source_timeout: float = Field(30.0, description="Per-source timeout in seconds")


class DeduplicationConfig(BaseModel):
    """Cross-source deduplication settings."""

    coordinate_precision: Optional[int] = Field(
        None, description="Decimal places kept in the dedup key (None keeps full precision)"
    )
    bucket_minutes: int = Field(60, description="Width of the time bucket in minutes")


class DispatchConfig(BaseModel):
    """Dispatch hook settings."""

    webhook_url: Optional[str] = Field(None, description="POST deduplicated alerts here when set")
    timeout: int = Field(30, description="Webhook timeout in seconds")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level")
    file: Optional[Path] = Field(None, description="Log file path")
    format: str = Field("json", description="Log format: 'json' or 'text'")


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=False,
    )

    alerts_adapter: AdapterSet = Field(AdapterSet.MOCK, description="Active adapter set")
    firms_api_key: Optional[str] = Field(None, description="NASA FIRMS map key")
    nasa_eonet_api_key: str = Field("DEMO_KEY", description="NASA API key for EONET")
    poll_interval: int = Field(300, description="Poll interval in seconds")

    usgs: UsgsConfig = Field(default_factory=UsgsConfig)
    firms: FirmsConfig = Field(default_factory=FirmsConfig)
    gdacs: GdacsConfig = Field(default_factory=GdacsConfig)
    eonet: EonetConfig = Field(default_factory=EonetConfig)
    synthetic: SyntheticConfig = Field(default_factory=SyntheticConfig)
    aggregator: AggregatorConfig = Field(default_factory=AggregatorConfig)
    deduplication: DeduplicationConfig = Field(default_factory=DeduplicationConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Environment and .env values override the YAML file passed as init kwargs."""
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, config_path=None) -> "AppConfig":
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = Path("config/default.yaml")
        elif isinstance(config_path, str):
            config_path = Path(config_path)

        if not config_path.exists():
            return cls()

        yaml = YAML(typ="safe")
        with open(config_path, "r") as f:
            yaml_data = yaml.load(f)

        return cls(**(yaml_data or {}))
