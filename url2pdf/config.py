"""
URL to PDF Service Configuration.

Environment-driven settings for the PDF rendering service.
"""

from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # =========================================================================
    # API SETTINGS
    # =========================================================================
    api_title: str = "URL to PDF Service"
    api_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Enable verbose logging")
    log_level: str = Field(default="INFO", description="Root log level")

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=3000, description="Listening port")

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: List[str] = Field(
        default=["*"],
        description="Allowed origins for CORS",
    )
    cors_methods: List[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_headers: List[str] = ["Origin", "X-Requested-With", "Content-Type", "Accept"]

    # =========================================================================
    # SESSION SETTINGS
    # =========================================================================
    max_concurrent_sessions: int = Field(
        default=3,
        ge=1,
        description="Maximum number of browser sessions rendering at once",
    )
    session_queue_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="How long a request may wait for a free session slot",
    )
    browser_headless: bool = Field(
        default=True,
        description="Run browsers in headless mode",
    )
    browser_launch_args: List[str] = Field(
        default=[
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-accelerated-2d-canvas",
            "--no-first-run",
            "--no-zygote",
            "--disable-gpu",
        ],
        description="Extra Chromium command line flags",
    )

    # =========================================================================
    # RENDERING DEFAULTS
    # =========================================================================
    viewport_width: int = Field(default=1920, description="Viewport width")
    viewport_height: int = Field(default=1080, description="Viewport height")
    user_agent: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        description="User agent sent by the rendering browser",
    )
    navigation_timeout_ms: int = Field(default=30000, description="Page load timeout in ms")
    settle_strategy: Literal["event", "fixed"] = Field(
        default="event",
        description="'event' waits for load/font/image signals, 'fixed' sleeps",
    )
    settle_delay_ms: int = Field(
        default=2000,
        ge=0,
        description="Upper bound (event) or exact length (fixed) of the settle wait",
    )
    disconnect_poll_interval_seconds: float = Field(
        default=0.5,
        gt=0,
        description="How often a running render checks for client disconnect",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
