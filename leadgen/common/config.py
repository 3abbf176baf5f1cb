"""
Configuration loader for the lead-generation assistant.

Loads all settings from environment variables (.env file).
Validates required settings and provides type-safe access.
"""

import logging
import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """
    Centralized configuration for the assistant and its provider clients.

    All values loaded from environment variables - NO SECRETS IN CODE.
    """

    # ===== MongoDB =====
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "email_automator_db")

    # ===== LLM =====
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    DEFAULT_MODEL: str = os.getenv("DEFAULT_MODEL", "gpt-4o-mini")

    # Classification and extraction want stable output; copywriting a bit warmer
    ANALYTICAL_TEMPERATURE: float = 0.2
    CREATIVE_TEMPERATURE: float = 0.7

    # ===== Enrichment / Search (ContactOut) =====
    CONTACTOUT_API_KEY: str = os.getenv("CONTACTOUT_API_KEY", "")
    CONTACTOUT_BASE_URL: str = os.getenv("CONTACTOUT_BASE_URL", "https://api.contactout.com")

    # ===== Web Scraping =====
    FIRECRAWL_API_KEY: str = os.getenv("FIRECRAWL_API_KEY", "")

    # ===== Outbound Email (Resend) =====
    RESEND_API_KEY: str = os.getenv("RESEND_API_KEY", "")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "MORPHIUS AI <onboarding@resend.dev>")
    SENDER_NAME: str = os.getenv("SENDER_NAME", "MORPHIUS AI Team")
    # Public base URL used for quick-reply links in outgoing emails
    BACKEND_URL: str = os.getenv("BACKEND_URL", "")
    # Follow-up content sent after a quick-reply click
    MEETING_LINK: str = os.getenv("MEETING_LINK", "")
    COMPANY_WEBSITE: str = os.getenv("COMPANY_WEBSITE", "https://www.morphius.in")

    # ===== HTTP / Retry =====
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
    RETRY_MAX_ATTEMPTS: int = int(os.getenv("RETRY_MAX_ATTEMPTS", "3"))
    RETRY_INITIAL_DELAY_MS: int = int(os.getenv("RETRY_INITIAL_DELAY_MS", "1000"))

    # ===== Pipeline Tuning =====
    OUTREACH_BATCH_SIZE: int = int(os.getenv("OUTREACH_BATCH_SIZE", "10"))
    SEND_BATCH_SIZE: int = int(os.getenv("SEND_BATCH_SIZE", "5"))
    PREVIEW_DEFAULT_COUNT: int = 3
    PAGE_TEXT_CHAR_LIMIT: int = int(os.getenv("PAGE_TEXT_CHAR_LIMIT", "15000"))
    LEAD_CONFIDENCE_THRESHOLD: int = int(os.getenv("LEAD_CONFIDENCE_THRESHOLD", "60"))
    MAX_SCRAPE_TARGETS: int = int(os.getenv("MAX_SCRAPE_TARGETS", "10"))

    # ===== Data Files =====
    PROSPECTS_CSV_PATH: str = os.getenv("PROSPECTS_CSV_PATH", "./public/email.csv")

    # ===== HTTP Service =====
    PORT: int = int(os.getenv("PORT", "3001"))

    # ===== Logging =====
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "simple")

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required configuration is present.
        Raises ValueError if critical settings are missing.
        """
        required_settings = {
            "OPENAI_API_KEY": cls.OPENAI_API_KEY,
            "CONTACTOUT_API_KEY": cls.CONTACTOUT_API_KEY,
            "FIRECRAWL_API_KEY": cls.FIRECRAWL_API_KEY,
        }

        missing = [name for name, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"Please check your .env file."
            )

        if cls.RETRY_MAX_ATTEMPTS < 1:
            raise ValueError("RETRY_MAX_ATTEMPTS must be at least 1")
        if cls.OUTREACH_BATCH_SIZE < 1 or cls.SEND_BATCH_SIZE < 1:
            raise ValueError("Batch sizes must be at least 1")

    @classmethod
    def warn_if_incomplete(cls, logger: logging.Logger) -> bool:
        """
        Run validate() at startup without refusing to start.

        Keyless runs are allowed; a feature whose key is missing fails with
        MissingCredentialError when it is first used.
        """
        try:
            cls.validate()
        except ValueError as e:
            logger.warning(f"{e} Features that need it will fail when used.")
            return False
        return True

    @classmethod
    def get_quick_reply_base(cls) -> Optional[str]:
        """Base URL for quick-reply links, or None when links are disabled."""
        if not cls.BACKEND_URL:
            return None
        return f"{cls.BACKEND_URL.rstrip('/')}/api/quick-reply-action"

    @classmethod
    def summary(cls) -> str:
        """Return a summary of the current configuration (safe for logging)."""
        return f"""
Configuration Summary:
  MongoDB: {'✓ Configured' if cls.MONGODB_URI else '✗ Missing (in-memory store)'}
  LLM: OpenAI {cls.DEFAULT_MODEL} {'✓' if cls.OPENAI_API_KEY else '✗ Missing'}
  ContactOut: {'✓ Configured' if cls.CONTACTOUT_API_KEY else '✗ Missing'}
  FireCrawl: {'✓ Configured' if cls.FIRECRAWL_API_KEY else '✗ Missing'}
  Resend: {'✓ Configured' if cls.RESEND_API_KEY else '✗ Missing'}
  Quick-reply links: {'Enabled' if cls.BACKEND_URL else 'Disabled'}
  Batch sizes: outreach={cls.OUTREACH_BATCH_SIZE}, send={cls.SEND_BATCH_SIZE}
"""
