from .config_setting import ConfigSetting

__all__ = [
    "ConfigSetting",
]
