# busfleet/models/user.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String, text

from busfleet.core.timeutils import utcnow
from busfleet.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String(255), nullable=False)

    # role: admin | technician
    role = Column(String(20), nullable=False, default="technician", index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("1"))

    created_at = Column(DateTime, nullable=False, default=utcnow)
