from .base import BaseRepository
from .config_setting_repository import ConfigSettingRepository

__all__ = [
    "BaseRepository",
    "ConfigSettingRepository",
]
