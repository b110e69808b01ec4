# app/data/models/product.py
from sqlalchemy import Column, Integer, String, Float, Text

from app.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"
    #sqlite bez AUTOINCREMENT oddaje id ostatniego usunietego wiersza
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    price = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
