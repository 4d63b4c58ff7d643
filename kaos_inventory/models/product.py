"""Product model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from kaos_inventory.database import Base
from kaos_inventory.models.enums import ShirtType, ShirtSize, enum_values


class Product(Base):
    """Product (kaos) with its on-hand stock count."""

    __tablename__ = 'product'
    __table_args__ = (
        CheckConstraint('stock >= 0', name='ck_product_stock_non_negative'),
        CheckConstraint('price >= 0', name='ck_product_price_non_negative'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_code = Column(String(50), nullable=False, unique=True, index=True)
    type = Column(Enum(ShirtType, name='shirt_type', values_callable=enum_values), nullable=False)
    size = Column(Enum(ShirtSize, name='shirt_size', values_callable=enum_values), nullable=False)
    # Only ever changed through product_service.adjust_stock
    stock = Column(Integer, nullable=False, default=0)
    price = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    consignment_items = relationship('ConsignmentItem', back_populates='product')

    @property
    def label(self):
        """Human label used in activity descriptions, e.g. 'Kaos Dewasa XL'."""
        return f"{self.type.value} {self.size.value}"

    def to_dict(self):
        return {
            'id': self.id,
            'productCode': self.product_code,
            'type': self.type.value,
            'size': self.size.value,
            'stock': self.stock,
            'price': self.price,
            'notes': self.notes,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Product(id={self.id}, code='{self.product_code}', stock={self.stock})>"
