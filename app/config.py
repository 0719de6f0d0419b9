from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Just 3 Days API"
    environment: str = "development"
    # Must be supplied outside development; there is no usable default
    secret_key: str = ""
    database_path: str = "data/just3days.db"
    api_prefix: str = "/api/v1"

    # JWT settings
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24  # 24 hours

    # Password KDF (bcrypt_pbkdf)
    password_kdf_rounds: int = 50
    password_hash_bytes: int = 32

    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
