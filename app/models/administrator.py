"""ORM model for administrator accounts."""

from sqlalchemy import Column, Integer, String

from app.models.base import Base


class Administrator(Base):
    """
    Administrator identity used for JWT login.

    Owner status is not stored here; it is derived from configuration
    (OWNER_ID / OWNER_EMAIL) whenever a token is issued.
    """

    __tablename__ = "administrators"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
