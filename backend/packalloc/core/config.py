"""
Application Configuration - Loaded from .env file
"""
from functools import lru_cache
from typing import Dict, List
from pydantic_settings import BaseSettings
from pydantic import field_validator
import json


DEFAULT_PACK_SEQUENCE = [
    "Cedarhurst",
    "Cedarhurst",
    "Bogota",
    "Bogota",
    "Toms River",
    "Teaneck Store",
    "Cedarhurst",
    "Bogota",
    "Toms River",
    "Cedarhurst",
    "Warehouse",
    "Warehouse",
    "Bogota",
    "Cedarhurst",
    "Warehouse",
]


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "PackAllocationService"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Security
    CORS_ORIGINS: str = '["http://localhost:3000","http://localhost:5173"]'

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # Sizes & locations
    SIZES: str = "XXS,XS,S,M,L,XL"
    LOCATIONS: str = '["Bogota","Cedarhurst","Toms River","Teaneck Store","Office","Warehouse"]'
    OFFICE_LOCATION: str = "Office"
    SINK_LOCATION: str = "Warehouse"
    OFFICE_SOURCE_LOCATION: str = "Bogota"
    IGNORABLE_STORE: str = "Teaneck Store"

    # Packs
    PACK_SEQUENCE: str = json.dumps(DEFAULT_PACK_SEQUENCE)
    PACK_WITH_XXS: str = '{"XXS": 1, "XS": 3, "S": 3, "M": 2, "L": 1, "XL": 1}'
    PACK_NO_XXS: str = '{"XS": 3, "S": 3, "M": 2, "L": 1, "XL": 1}'
    OFFICE_SAMPLE: str = '{"XS": 1, "S": 1}'

    @field_validator("LOCATIONS", "PACK_SEQUENCE")
    @classmethod
    def _check_name_list(cls, v: str) -> str:
        try:
            names = json.loads(v)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON list: {e}")
        if not isinstance(names, list) or not all(isinstance(n, str) and n.strip() for n in names):
            raise ValueError("Expected a JSON list of non-empty location names")
        return v

    @field_validator("PACK_WITH_XXS", "PACK_NO_XXS", "OFFICE_SAMPLE")
    @classmethod
    def _check_size_vector(cls, v: str) -> str:
        try:
            vector = json.loads(v)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON object: {e}")
        if not isinstance(vector, dict):
            raise ValueError("Expected a JSON object of size -> quantity")
        for size, qty in vector.items():
            if not isinstance(qty, int) or isinstance(qty, bool) or qty < 0:
                raise ValueError(f"Quantity for size '{size}' must be a non-negative integer")
        if sum(vector.values()) <= 0:
            raise ValueError("Size vector must contain at least one unit")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        try:
            return json.loads(self.CORS_ORIGINS)
        except (json.JSONDecodeError, TypeError):
            return ["http://localhost:3000"]

    @property
    def sizes_list(self) -> List[str]:
        return [s.strip().upper() for s in self.SIZES.split(",") if s.strip()]

    @property
    def locations_list(self) -> List[str]:
        return json.loads(self.LOCATIONS)

    @property
    def pack_sequence_list(self) -> List[str]:
        return json.loads(self.PACK_SEQUENCE)

    @property
    def pack_with_xxs(self) -> Dict[str, int]:
        return json.loads(self.PACK_WITH_XXS)

    @property
    def pack_no_xxs(self) -> Dict[str, int]:
        return json.loads(self.PACK_NO_XXS)

    @property
    def office_sample(self) -> Dict[str, int]:
        return json.loads(self.OFFICE_SAMPLE)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
