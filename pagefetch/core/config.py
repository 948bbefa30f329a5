import os

class Settings:
    # Content fetching defaults
    CONTENT_TIMEOUT: int = int(os.getenv("CONTENT_TIMEOUT", "20"))
    CONTENT_MAX_CHARS: int = int(os.getenv("CONTENT_MAX_CHARS", "20000"))

    # Dialer sub-timeouts (seconds), independent of the overall deadline
    DIAL_TIMEOUT: float = float(os.getenv("DIAL_TIMEOUT", "15"))
    RESOLVE_TIMEOUT: float = float(os.getenv("RESOLVE_TIMEOUT", "10"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()

settings = Settings()
