"""Reseller model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from kaos_inventory.database import Base


class Reseller(Base):
    """Reseller (counterparty holding consigned goods)."""

    __tablename__ = 'reseller'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    consignments = relationship('Consignment', back_populates='reseller')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'address': self.address,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Reseller(id={self.id}, name='{self.name}')>"
