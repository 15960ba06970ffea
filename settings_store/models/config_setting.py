from sqlalchemy import Boolean, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..config import SettingsManager
from ..database.base import Base

_settings = SettingsManager.get_instance()


class ConfigSetting(Base):
    """One persisted configuration value, addressed by (section, name)."""

    __tablename__ = _settings.storage.table_name_settings
    __table_args__ = (
        UniqueConstraint("section", "name"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)

    section: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # May itself be a colon path, e.g. "Authentication:UserName"
    name: Mapped[str] = mapped_column(String(1000), nullable=False)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Reserved, never read by the store
    encrypted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def key(self) -> str:
        """Flat configuration key of this row."""
        return f"{self.section}:{self.name}"

    def __repr__(self) -> str:
        return f"<ConfigSetting(id='{self.id}', section='{self.section}', name='{self.name}')>"
