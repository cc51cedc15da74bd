from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DEBUG: bool = False
    APP_NAME: str = "paylinks"
    version: str = "0.1.0"
    APP_URL: str = "http://localhost:3000"
    APP_DATABASE_DSN: str = "sqlite:////tmp/paylinks.db"
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Payment links
    payment_link_ttl_days: int = 30
    payment_link_list_limit: int = 100
    expiry_sweep_enabled: bool = True

    # PayTrace settings
    paytrace_api_url: str = "https://api.sandbox.paytrace.com"
    paytrace_username: str = ""
    paytrace_password: str = ""
    paytrace_integrator_id: str = ""
    paytrace_timeout_seconds: float = 30.0
    paytrace_token_safety_margin_seconds: int = 60

    @property
    def paytrace_configured(self) -> bool:
        return bool(self.paytrace_username and self.paytrace_password)


settings = Settings()
