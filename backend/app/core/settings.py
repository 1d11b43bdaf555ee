import os


class Settings:
    def __init__(self):
        self.app_name = "LeadDesk CRM"
        self.api_version = "1.0.0"
        self.environment = os.getenv("LEADDESK_ENVIRONMENT", "development")
        self.secret_key = os.getenv("LEADDESK_SECRET_KEY", "CHANGE_ME")
        self.SECRET_KEY = self.secret_key
        self.access_token_expire_minutes = 60 * 12
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.access_token_expire_minutes
        self.database_url = os.getenv("LEADDESK_DATABASE_URL", "sqlite:///./leaddesk.db")
        self.log_level = os.getenv("LEADDESK_LOG_LEVEL", "INFO").upper()
        # Delay before a retried lead (DNR/Cut Call/Call Back) is due for follow-up again
        self.followup_delay_hours = int(os.getenv("LEADDESK_FOLLOWUP_DELAY_HOURS", "24"))
        self.api_base_url = os.getenv("LEADDESK_API_BASE_URL", "http://localhost:8000")


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached Settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None
