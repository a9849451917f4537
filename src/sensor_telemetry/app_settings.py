from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # InfluxDB Configuration
    influxdb_host: str = Field(default="http://localhost:8086", description="InfluxDB URL")
    influxdb_org: str = Field(default="", description="InfluxDB organization")
    influxdb_token: str = Field(default="", description="InfluxDB API token")
    influxdb_bucket: str = Field(default="Temperature", description="Bucket holding sensor readings")
    influxdb_measurement: str = Field(default="aht10", description="Sensor measurement name")
    influxdb_timeout_ms: int = Field(default=10000, description="Query timeout in milliseconds")

    # Query Settings
    current_lookback_ms: int = Field(default=86_400_000, description="Lookback for current value queries")

    # HTTP Settings
    http_password: str = Field(default="", description="Bearer token required on range endpoints")
    http_host: str = Field(default="::", description="Bind address")
    http_port: int = Field(default=3000, description="HTTP port")
    static_dir: str = Field(default="./static", description="Directory served at /")
    warmup_on_startup: bool = Field(default=True, description="Query the store once at startup")

    # Compression Settings
    gzip_enabled: bool = True
    gzip_min_size: int = 1024      # 1 KiB
    gzip_level: int = 6

    # Application Settings
    log_level: str = Field(default="INFO", description="Logging level")

    # CORS Settings
    allowed_origins: str = Field(default="*", description="Allowed CORS origins")

    def get_allowed_origins(self) -> list:
        """Comma-separated origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


app_settings = AppSettings()
