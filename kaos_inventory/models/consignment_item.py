"""Consignment Item model."""
from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from kaos_inventory.database import Base


class ConsignmentItem(Base):
    """Consignment Item (detail konsinyasi). quantity is fixed at creation."""

    __tablename__ = 'consignment_item'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_consignment_item_quantity_positive'),
        CheckConstraint(
            'returned_quantity >= 0 AND returned_quantity <= quantity',
            name='ck_consignment_item_returned_range'
        ),
        CheckConstraint('price_per_item >= 0', name='ck_consignment_item_price_non_negative'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    consignment_id = Column(Integer, ForeignKey('consignment.id'), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey('product.id'), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    returned_quantity = Column(Integer, nullable=False, default=0)
    price_per_item = Column(Integer, nullable=False, default=0)

    # Relationships
    consignment = relationship('Consignment', back_populates='items')
    product = relationship('Product', back_populates='consignment_items')

    @property
    def outstanding_quantity(self):
        """Units still held by the reseller."""
        return self.quantity - self.returned_quantity

    @property
    def is_fully_returned(self):
        return self.returned_quantity == self.quantity

    def to_dict(self):
        return {
            'id': self.id,
            'consignmentId': self.consignment_id,
            'productId': self.product_id,
            'quantity': self.quantity,
            'returnedQuantity': self.returned_quantity,
            'pricePerItem': self.price_per_item,
        }

    def __repr__(self):
        return (
            f"<ConsignmentItem(id={self.id}, product_id={self.product_id}, "
            f"qty={self.quantity}, returned={self.returned_quantity})>"
        )
