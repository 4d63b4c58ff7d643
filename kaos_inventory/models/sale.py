"""Sale model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from kaos_inventory.database import Base


class Sale(Base):
    """Sale (penjualan). consignment_id NULL means a direct sale."""

    __tablename__ = 'sale'
    __table_args__ = (
        CheckConstraint('amount > 0', name='ck_sale_amount_positive'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_code = Column(String(50), nullable=False, unique=True, index=True)
    consignment_id = Column(Integer, ForeignKey('consignment.id'), nullable=True, index=True)
    amount = Column(Integer, nullable=False)
    sale_date = Column(DateTime, nullable=False, default=datetime.now, index=True)
    notes = Column(Text, nullable=True)

    consignment = relationship('Consignment', back_populates='sales')

    @property
    def is_direct(self):
        return self.consignment_id is None

    def to_dict(self):
        return {
            'id': self.id,
            'saleCode': self.sale_code,
            'consignmentId': self.consignment_id,
            'amount': self.amount,
            'saleDate': self.sale_date.isoformat() if self.sale_date else None,
            'notes': self.notes,
        }

    def __repr__(self):
        return f"<Sale(id={self.id}, code='{self.sale_code}', amount={self.amount})>"
