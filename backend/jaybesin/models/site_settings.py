"""
site_settings table: the single config/global document
- data holds the whole settings object; writes merge into it
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, JSON

from jaybesin.database import Base

GLOBAL_SETTINGS_KEY = "global"


class SiteSettingsDocument(Base):
    __tablename__ = "site_settings"

    key = Column(String(40), primary_key=True, default=GLOBAL_SETTINGS_KEY)
    data = Column(JSON, nullable=False, default=dict)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
