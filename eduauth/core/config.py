# eduauth/core/config.py
import os
from typing import ClassVar
from pydantic import BaseModel, Field

def _default_database_url() -> str:
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    os.makedirs(data_dir, exist_ok=True)
    return os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(data_dir, 'eduauth.db')}")

def _default_artifact_dir() -> str:
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    return os.path.abspath(os.getenv("ARTIFACT_DIR", os.path.join(data_dir, "public")))

def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}

class Settings(BaseModel):
    # Constante (não vira campo Pydantic)
    DATA_DIR: ClassVar[str] = os.path.abspath(os.getenv("DATA_DIR", "./data"))

    DATABASE_URL: str = Field(default_factory=_default_database_url)
    SECRET_KEY: str = Field(default_factory=lambda: os.getenv("SECRET_KEY", "CHANGE_ME_SUPER_SECRET"))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")))

    # verificação pública / artefatos
    PUBLIC_BASE_URL: str = Field(default_factory=lambda: os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"))
    ARTIFACT_DIR: str = Field(default_factory=_default_artifact_dir)
    RENDER_ARTIFACTS_INLINE: bool = Field(default_factory=lambda: _env_bool("RENDER_ARTIFACTS_INLINE", "false"))

    # e-mail (desligado quando SMTP_HOST vazio)
    SMTP_HOST: str = Field(default_factory=lambda: os.getenv("SMTP_HOST", ""))
    SMTP_PORT: int = Field(default_factory=lambda: int(os.getenv("SMTP_PORT", "25")))
    SMTP_SENDER: str = Field(default_factory=lambda: os.getenv("SMTP_SENDER", "no-reply@eduauth.local"))

    # verificação pública: anti-enumeração
    VERIFY_RATE_LIMIT: str = Field(default_factory=lambda: os.getenv("VERIFY_RATE_LIMIT", "20/minute"))
    RATE_LIMIT_STORAGE_URI: str = Field(default_factory=lambda: os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"))

    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    LOG_JSON: bool = Field(default_factory=lambda: _env_bool("LOG_JSON", "false"))

settings = Settings()
