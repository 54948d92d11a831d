from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_ISSUER: str = "MySaaS"
    JWT_AUDIENCE: str = "MySaaSUsers"
    REFRESH_TOKEN_BYTES: int = 64

    PASSWORD_RESET_TOKEN_BYTES: int = 32
    PASSWORD_RESET_TOKEN_EXPIRE_HOURS: int = 1
    IDENTITY_RESET_TOKEN_EXPIRE_MINUTES: int = 15

    # Identity policy
    PASSWORD_MIN_LENGTH: int = 8
    LOCKOUT_MAX_FAILED_ATTEMPTS: int = 5
    LOCKOUT_MINUTES: int = 5
    BCRYPT_ROUNDS: int = 12

    ENVIRONMENT: str = "development"  # "development" or "production"
    FRONTEND_URL: str = "http://localhost:5173"

    @property
    def is_development(self):
        return self.ENVIRONMENT == "development"

    @property
    def cors_origins(self):
        return [self.FRONTEND_URL, "http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
