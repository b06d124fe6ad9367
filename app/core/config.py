from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./weekly_tally.db"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://tally.example.com,https://admin.tally.example.com"
    CORS_ORIGINS: str = "*"

    # Remote image storage. All three must be set for uploads to work.
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    IMAGE_FOLDER: str = "weekly-tally"
    IMAGE_TIMEOUT_SECONDS: float = 10.0

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def image_storage_configured(self) -> bool:
        return all((
            self.CLOUDINARY_CLOUD_NAME.strip(),
            self.CLOUDINARY_API_KEY.strip(),
            self.CLOUDINARY_API_SECRET.strip(),
        ))


settings = Settings()
