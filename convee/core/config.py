"""
Pydantic Settings — engine configuration loaded from environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Logging ───────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="console", pattern="^(console|json)$")

    # ── Engine defaults ───────────────────────
    DEFAULT_PROCESS_NAME: str = "Process"
    DEFAULT_PIPELINE_NAME: str = "Pipeline"

    # ── Error stack ───────────────────────────
    # Record the metadata keys collected so far on every stack frame.
    STACK_INCLUDE_METADATA_KEYS: bool = True

    # ── Chain validation ──────────────────────
    # Raise ChainTypeError on annotated step mismatches instead of warning.
    STRICT_CHAIN_TYPES: bool = False

    model_config = {"env_prefix": "CONVEE_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
