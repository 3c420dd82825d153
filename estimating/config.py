# estimating/config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# real environment variables take precedence over .env
load_dotenv()


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration read from the environment.

    company_id is the tenant every repository call is scoped to. Running
    single-tenant is a matter of setting one COMPANY_ID, never a constant.
    """
    database_url: str
    company_id: Optional[str]
    log_dir: str
    log_level: str
    default_region: str

    def require_company_id(self) -> str:
        if not self.company_id:
            raise RuntimeError("COMPANY_ID not set")
        return self.company_id


def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./estimates.db"),
        company_id=os.getenv("COMPANY_ID") or None,
        log_dir=os.getenv("LOG_DIR", "logs"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        default_region=os.getenv("DEFAULT_REGION", "South East"),
    )
