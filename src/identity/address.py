"""Customer addresses referenced by orders.

Address book management lives outside checkout; orders only need to resolve
an address id to the user that owns it.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from shared.database import Base, new_id, utcnow


class Address(Base):
    __tablename__ = "addresses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    street: Mapped[str] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(100))
    state: Mapped[str | None] = mapped_column(String(100))
    postal_code: Mapped[str] = mapped_column(String(20))
    country: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


def find_user_address(session: Session, user_id: str, address_id: str) -> Address | None:
    """Return the address only when it belongs to ``user_id``."""
    return session.scalars(select(Address).where(Address.id == address_id, Address.user_id == user_id)).first()
