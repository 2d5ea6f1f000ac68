import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import List, Optional

DEFAULT_REPORT_CAP = 30


class Settings(BaseSettings):
    # Environment
    ENV: str = "development"  # "development" | "production"
    CONFIG_STRICT: bool = False
    AUTO_CREATE_TABLES: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None

    # Supabase auth
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_JWT_SECRET: Optional[str] = None  # enables local HS256 verification
    AUTH_TIMEOUT_SECONDS: float = 5.0

    # LLM (Groq)
    GROQ_API_KEY: Optional[str] = None
    LLM_MODEL: str = "llama-3.1-8b-instant"
    LLM_MAX_TOKENS: int = 4000
    LLM_TIMEOUT_SECONDS: float = 9.0

    # Usage limiting
    REPORT_CAP: str = str(DEFAULT_REPORT_CAP)  # parsed leniently, see report_cap
    FEATURE_USAGE_ENFORCEMENT: str = "on"
    BYPASS_IPS: str = ""  # comma-separated
    TOOL_NAME: str = "elev8analyzer"

    # CORS
    CORS_ALLOWED_ORIGINS: str = (
        "https://grant.yourbizguru.com,"
        "https://compli.yourbizguru.com,"
        "https://analyzer.yourbizguru.com,"
        "https://www.yourbizguru.com"
    )
    CORS_ALLOWED_ORIGIN_REGEX: str = r"https://.*\.vercel\.app|https://.*\.replit\.dev"

    # PDF export
    TOOLKIT_ICON: Optional[str] = None  # file path or URL
    PDF_BRAND: str = "YourBizGuru.com"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return (self.ENV or "").lower() == "production"

    @property
    def report_cap(self) -> int:
        try:
            return int(str(self.REPORT_CAP).strip())
        except (TypeError, ValueError):
            return DEFAULT_REPORT_CAP

    @property
    def enforcement_enabled(self) -> bool:
        return (self.FEATURE_USAGE_ENFORCEMENT or "on").strip().lower() == "on"

    @property
    def bypass_ips(self) -> List[str]:
        return [ip.strip() for ip in (self.BYPASS_IPS or "").split(",") if ip.strip()]

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in (self.CORS_ALLOWED_ORIGINS or "").split(",") if o.strip()]


settings = Settings()


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate required configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("complipilot")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    required_keys = [
        "DATABASE_URL",
        "GROQ_API_KEY",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
    ]

    missing = [key for key in required_keys if not getattr(cfg, key, None)]
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
