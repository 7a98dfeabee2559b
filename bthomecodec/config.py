from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict, BaseSettings


class CodecSettings(BaseSettings):
    log_level: str = Field("WARNING", validation_alias="BTHOME_LOG_LEVEL")
    log_ring_size: int = Field(200, validation_alias="BTHOME_LOG_RING_SIZE")

    # Defaults for the command line tool; the codec API always takes explicit arguments.
    encryption_key: Optional[str] = Field(None, validation_alias="BTHOME_ENCRYPTION_KEY")
    device_address: Optional[str] = Field(None, validation_alias="BTHOME_DEVICE_ADDRESS")
    counter: int = Field(0, ge=0, le=0xFFFFFFFF, validation_alias="BTHOME_COUNTER")
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", populate_by_name=True, extra="ignore")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> CodecSettings:
    return CodecSettings()
