from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (e.g., plain, json)")

    # Worker Configuration
    worker_timeout_seconds: float = Field(
        default=30.0, description="Seconds before a background sweep falls back to synchronous evaluation"
    )

    # Sweep Configuration
    default_resolution: int = Field(default=64, description="Default preview grid resolution")
    max_resolution: int = Field(default=512, description="Max allowed grid resolution")
    default_range_min: float = Field(default=-64.0, description="Default lower bound of the X/Z range")
    default_range_max: float = Field(default=64.0, description="Default upper bound of the X/Z range")
    default_y_level: float = Field(default=64.0, description="Default preview slice height")

    # Node Defaults
    default_world_height: float = Field(default=320.0, description="Default ToY of gradient nodes")
    default_base_height: float = Field(default=100.0, description="BaseHeight when the content field is missing")
    curve_samples_per_segment: int = Field(default=32, description="Catmull-Rom samples per curve segment")
    gradient_epsilon: float = Field(default=0.5, description="Finite difference step of GradientWarp")

    class Config:
        env_prefix = "PY_DENSITY_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate singleton settings object
settings = Settings()
