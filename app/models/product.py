"""ORM model for catalog products."""

from sqlalchemy import JSON, Column, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB

from app.models.base import Base


class Product(Base):
    """Catalog product; images holds the public blob URLs in display order."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    images = Column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
        default=list,
    )
    stock = Column(Integer, nullable=False, default=0)
