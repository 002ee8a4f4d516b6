from pydantic_settings import BaseSettings, NoDecode
from pydantic import field_validator
from typing import Annotated, Optional, List, Union


class Settings(BaseSettings):
    # Database
    database_url: Optional[str] = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # API
    api_prefix: str = "/api"
    public_base_url: Optional[str] = None
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    bcrypt_rounds: int = 12

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Payments
    currency: str = "usd"
    stripe_secret_key: Optional[str] = None
    paypal_mode: str = "sandbox"
    paypal_client_id: Optional[str] = None
    paypal_client_secret: Optional[str] = None

    # Browser redirects after the PayPal round trip
    payment_success_redirect: str = "/dashboard?payment=success"
    payment_failed_redirect: str = "/checkout?error=payment_failed"
    payment_cancelled_redirect: str = "/checkout?error=payment_cancelled"

    # Static assets
    static_dir: Optional[str] = None

    # CORS
    cors_origins: Annotated[List[str], NoDecode] = ["*"]

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS origins from environment variable (comma-separated) or use default list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
