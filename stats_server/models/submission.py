from datetime import datetime

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from stats_server.db.base import Base


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    unique_id: Mapped[str] = mapped_column(String(40), unique=True, nullable=False, index=True)

    php_version: Mapped[str | None] = mapped_column(String(15), nullable=True, index=True)
    db_type: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    db_version: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    cms_version: Mapped[str | None] = mapped_column(String(15), nullable=True, index=True)
    server_os: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    modified: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)
