"""
Settings - Pydantic models for type-safe configuration.

This module defines all runtime settings as Pydantic models, providing
validation, type hints, and automatic environment variable loading.

Example:
    >>> from replay_runtime.config import Settings, load_config
    >>> settings = load_config()  # Loads from env, yaml, and defaults
    >>> print(settings.idle.timeout_ms)
    10000
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IdleSettings(BaseModel):
    """
    Network-idle detection settings.
    
    Attributes:
        timeout_ms: Hard deadline for a single wait, after which the wait
            returns regardless of pending requests
        idle_window_ms: Continuous zero-pending duration required to call
            the page settled
        poll_interval_ms: Delay between two checks of the pending counter
        resource_types: Request resource types that count as pending
    """
    timeout_ms: int = Field(default=10000, ge=0, le=600000)
    idle_window_ms: int = Field(default=500, ge=0, le=60000)
    poll_interval_ms: int = Field(default=100, ge=10, le=5000)
    resource_types: List[str] = Field(default_factory=lambda: ["xhr", "fetch"])


class LocatorSettings(BaseModel):
    """
    Candidate locator resolution settings.
    
    Attributes:
        wait_timeout_ms: Per-candidate wait for the first attached match
    """
    wait_timeout_ms: int = Field(default=3000, ge=0, le=60000)


class RequestSettings(BaseModel):
    """
    HTTP request step settings.
    
    Attributes:
        transport_timeout_s: Timeout handed to the transport. None keeps the
            transport's own default; the executor never adds one.
        verify_tls: Verify TLS certificates (httpx transport only)
    """
    transport_timeout_s: Optional[float] = Field(default=None, gt=0)
    verify_tls: bool = True


class ReconcileSettings(BaseModel):
    """
    Cross-source fact reconciliation settings.
    
    Attributes:
        ui_marker: Substring identifying the UI fragment carrying the fact
        db_field: Column holding the fact in the first DB row
        api_field: Payload field holding the fact
    """
    ui_marker: str = Field(default="stat-number", min_length=1)
    db_field: str = Field(default="count", min_length=1)
    api_field: str = Field(default="total_projects", min_length=1)


class ExportSettings(BaseModel):
    """
    Result export settings.
    
    Attributes:
        output_dir: Base directory for exported step results
        api_folder: Sub-folder for API result JSON files
        database_folder: Sub-folder for database result CSV files
    """
    output_dir: str = "./test-results"
    api_folder: str = "api-execution"
    database_folder: str = "database-execution"


class LoggingSettings(BaseModel):
    """
    Logging configuration.
    
    Attributes:
        level: Log level
        format: Log format string
        file: Log file path (None for console only)
        json_format: Use JSON format for logs
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


class Settings(BaseSettings):
    """
    Root settings container - single source of truth for all configuration.
    
    Settings are loaded in this priority order (highest to lowest):
    1. Explicit values passed to constructor
    2. Environment variables (prefixed with REPLAY_RUNTIME__)
    3. Default values
    
    ConfigLoader passes the YAML config file's values to the constructor,
    so a value set in the file outranks the same environment variable.
    
    Example:
        >>> settings = Settings()  # Load from env vars
        >>> settings = Settings(idle=IdleSettings(timeout_ms=5000))  # Override
    """
    
    model_config = SettingsConfigDict(
        env_prefix="REPLAY_RUNTIME__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
    
    idle: IdleSettings = Field(default_factory=IdleSettings)
    locator: LocatorSettings = Field(default_factory=LocatorSettings)
    request: RequestSettings = Field(default_factory=RequestSettings)
    reconcile: ReconcileSettings = Field(default_factory=ReconcileSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    
    debug: bool = False
    
    def merge_with(self, overrides: dict) -> "Settings":
        """
        Create a new Settings instance with overrides applied.
        
        Args:
            overrides: Dictionary of values to override
            
        Returns:
            New Settings instance with overrides applied
        """
        current = self.model_dump()
        
        def deep_merge(base: dict, updates: dict) -> dict:
            for key, value in updates.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    deep_merge(base[key], value)
                else:
                    base[key] = value
            return base
        
        merged = deep_merge(current, overrides)
        return Settings(**merged)
