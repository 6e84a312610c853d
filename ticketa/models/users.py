from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ticketa.database.db import Base


class User(Base):
    """Directory entry for a principal; identity is managed upstream."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
