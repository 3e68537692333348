"""Environment-based configuration for the DEVONthink bridge."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Bridge configuration.

    All settings can be overridden via environment variables with
    DEVONTHINK_ prefix. For example:
        DEVONTHINK_APPLICATION_NAME="DEVONthink 3"
        DEVONTHINK_DEFAULT_TIMEOUT=60
    """

    # Scripting target
    application_name: str = "DEVONthink"

    # Scripting host
    osascript_path: str = "osascript"

    # Timeouts in seconds
    default_timeout: float = 30.0
    max_timeout: float = 300.0

    # Logging
    log_level: str = "WARNING"

    model_config = {"env_prefix": "DEVONTHINK_"}


settings = Settings()
