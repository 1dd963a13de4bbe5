import re

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_HEATER_ID = re.compile(r"^[0-9A-Fa-f]{6}$")


class HeaterConfig(BaseModel):
    id: str
    name: str

    @field_validator("id")
    @classmethod
    def _hex_id(cls, v: str) -> str:
        if not _HEATER_ID.match(v):
            raise ValueError(f"Heater id must be 6 hex characters, got {v!r}")
        return v


DEFAULT_HEATERS = [
    HeaterConfig(id="C4402D", name="Spisebord"),
    HeaterConfig(id="C431FB", name="Sofa"),
    HeaterConfig(id="10DB9C", name="Soveværelse"),
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Paletten Hub"

    # MQTT broker
    mqtt_host: str = "mqtt.oliverflecke.me"
    mqtt_port: int = 1883
    mqtt_client_id: str = "paletten-cloud-hub"
    mqtt_keepalive_seconds: int = 5
    mqtt_inbox_size: int = 10           # events buffered between paho thread and ingestor
    mqtt_poll_timeout_seconds: float = 1.0

    # Storage
    sqlite_path: str = Field(default="paletten.db")

    # Ingestor -> executor channel
    queue_capacity: int = Field(default=10, ge=1)

    # Fixed for the lifetime of the process
    heaters: list[HeaterConfig] = Field(default_factory=lambda: list(DEFAULT_HEATERS))

    # Logging
    log_level: str = "INFO"
    log_file: str = "paletten-hub.log"

    @field_validator("heaters")
    @classmethod
    def _three_heaters(cls, v: list[HeaterConfig]) -> list[HeaterConfig]:
        if len(v) != 3:
            raise ValueError(f"Exactly 3 heaters must be configured, got {len(v)}")
        return v


settings = Settings()
