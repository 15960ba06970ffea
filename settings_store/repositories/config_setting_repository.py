from sqlalchemy.orm import Session

from ..models import ConfigSetting
from .base import BaseRepository


class ConfigSettingRepository(BaseRepository[ConfigSetting]):
    """Repository for ConfigSetting rows."""

    def __init__(self, session: Session):
        super().__init__(ConfigSetting, session)

    def get_by_section(self, section: str) -> list[ConfigSetting]:
        """Get all rows persisted for a section."""
        return self.get_by(section=section)

    def get_by_key(self, section: str, name: str) -> ConfigSetting | None:
        """Get the row addressed by (section, name), if any."""
        return self.get_one_by(section=section, name=name)

    def add(self, section: str, name: str, value: str, encrypted: bool = False) -> ConfigSetting:
        """Insert a new row."""
        return self.create(section=section, name=name, value=value, encrypted=encrypted)
