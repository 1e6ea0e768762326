"""
FastAPI dependencies exposing the process-wide, read-only configuration.
"""

from typing import Annotated

from fastapi import Depends

from gmail_connect.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """Return the settings object built once at startup."""
    return get_settings()


SettingsDependency = Annotated[AppSettings, Depends(get_app_settings)]

__all__ = ["SettingsDependency", "get_app_settings"]
