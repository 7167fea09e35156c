from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from task_summarizer.database import Base


class LoginSession(Base):
    __tablename__ = "sessions"
    __table_args__ = (Index("ix_sessions_expires_at", "expires_at"),)

    # Opaque token handed to the browser in the session cookie
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    clickup_user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("identities.clickup_user_id", ondelete="CASCADE"),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
