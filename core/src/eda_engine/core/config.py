from enum import Enum

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentOption(str, Enum):
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


class AppSettings(BaseAppSettings):
    APP_NAME: str = "EDA Chat Engine"
    APP_DESCRIPTION: str = "Tabular profiling and chart generation for an EDA chat agent."
    APP_VERSION: str = "0.1.0"
    CORS_ORIGINS: list[str] = ["*"]


class EnvironmentSettings(BaseAppSettings):
    ENVIRONMENT: EnvironmentOption = EnvironmentOption.LOCAL
    LOG_LEVEL: str = "INFO"


class OpenAISettings(BaseAppSettings):
    OPENAI_API_KEY: SecretStr | None = None
    OPENAI_MODEL_ID: str | None = None


class StrandsSettings(BaseAppSettings):
    STRANDS_MODEL_PROVIDER: str | None = None
    STRANDS_MODEL_ID: str | None = None
    AGENT_TEMPERATURE: float = 0.1
    AGENT_MAX_TOKENS: int = 4096


class AnalysisSettings(BaseAppSettings):
    # Wall-clock budget for one agent execution (serverless hobby limit).
    AGENT_TIMEOUT_SECONDS: float = 9.0
    HISTORY_TURNS: int = 10


class VectorSearchSettings(BaseAppSettings):
    EMBEDDING_MODEL_ID: str = "text-embedding-3-small"
    VECTOR_SEARCH_K: int = 2


class Settings(
    AppSettings,
    EnvironmentSettings,
    OpenAISettings,
    StrandsSettings,
    AnalysisSettings,
    VectorSearchSettings,
):
    pass


settings = Settings()
