from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """應用程式設定"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True
    )

    # Application Configuration
    app_port: int = Field(default=3000, alias="PORT")
    app_host: str = Field(default="0.0.0.0")
    flask_env: str = Field(default="production")
    secret_key: str = Field(default="fallback-secret-key-change-in-production")
    cors_origin: str = Field(default="*", description="Allowed CORS origin (set to your site origin in prod)")
    max_content_length: int = Field(default=1048576)  # 1MB JSON body

    # Storage Configuration
    database_path: str = Field(default="data/qr_cards.db", alias="QRCARD_DB_PATH")
    admin_list_limit: int = Field(default=100)

    # Profile / Consent
    slug_length: int = Field(default=8, ge=4, le=32)
    slug_max_attempts: int = Field(default=5, ge=1, description="Slug collision retry limit")
    consent_version: str = Field(default="v1")
    default_consent_text: str = Field(default="consent")
    consent_failure_fatal: bool = Field(default=False, description="Roll back the submission if the consent insert fails")

    # QR rendering (passed through to the renderer)
    qr_error_correction: str = Field(default="M", pattern="^[LMQH]$")
    qr_margin: int = Field(default=1, ge=0)
    qr_box_size: int = Field(default=10, ge=1)

    # Development
    debug: bool = Field(default=False)
    verbose_errors: bool = Field(default=False, description="Show detailed technical errors (for debugging)")


# 全域設定實例
settings = Settings()
