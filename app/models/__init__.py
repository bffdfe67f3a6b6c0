"""SQLAlchemy ORM models."""

from app.models.administrator import Administrator
from app.models.base import Base
from app.models.product import Product

__all__ = ["Administrator", "Base", "Product"]
