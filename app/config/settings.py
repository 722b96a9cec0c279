from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Policy layer runs in-process, so writes go through this key
    password_reset_redirect_url: str = "http://localhost:3000/reset-password"  # Link target in reset emails

    # Persistence
    storage_backend: str = "supabase"  # supabase | memory

    # Marketplace rules
    bootstrap_superadmin_email: str = ""  # Always provisioned as superadmin/approved
    allow_approval_reconsideration: bool = False  # rejected -> approved, approved -> rejected

    # App
    app_name: str = "marketplace-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def uses_memory_store(self) -> bool:
        return self.storage_backend.lower() == "memory"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
