from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Durable JSON documents
    DATA_DIR: str = "."
    PROTECT_STATE_FILE: str = "autoProtect.json"
    LOG_FILE: str = "logs.json"
    LOG_RETENTION_DAYS: int = 30

    # Shared secret for control endpoints (protect / simulate-break / command)
    PROTECT_API_KEY: str = ""
    PROTECT_KEY_FILE: str = "protect_key.json"
    PROTECT_KEY_AUTOGENERATE: bool = False  # local dev only

    # Zone simulator
    SIM_API_BASE: str = "http://localhost:5000"
    SIM_INTERVAL: float = 5.0
    SIM_TIMEOUT: float = 3.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def data_path(self, name: str) -> Path:
        """Resolve a document name against DATA_DIR (absolute names pass through)."""
        path = Path(name)
        if path.is_absolute():
            return path
        return Path(self.DATA_DIR) / path


settings = Settings()
