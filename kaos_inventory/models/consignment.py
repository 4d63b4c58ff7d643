"""Consignment model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from kaos_inventory.database import Base
from kaos_inventory.models.enums import ConsignmentStatus, enum_values


class Consignment(Base):
    """
    Consignment (konsinyasi): a batch of goods handed to a reseller.

    total_items / total_value are derived from the items at creation time.
    paid_amount and status only move through consignment_service.
    """

    __tablename__ = 'consignment'
    __table_args__ = (
        CheckConstraint('paid_amount >= 0', name='ck_consignment_paid_non_negative'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    consignment_code = Column(String(50), nullable=False, unique=True, index=True)
    reseller_id = Column(Integer, ForeignKey('reseller.id'), nullable=False, index=True)
    total_items = Column(Integer, nullable=False, default=0)
    total_value = Column(Integer, nullable=False, default=0)
    paid_amount = Column(Integer, nullable=False, default=0)
    status = Column(
        Enum(ConsignmentStatus, name='consignment_status', values_callable=enum_values),
        nullable=False,
        default=ConsignmentStatus.AKTIF,
        index=True
    )
    taken_date = Column(DateTime, nullable=False, default=datetime.now)
    return_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    reseller = relationship('Reseller', back_populates='consignments')
    items = relationship('ConsignmentItem', back_populates='consignment', order_by='ConsignmentItem.id')
    sales = relationship('Sale', back_populates='consignment')

    @property
    def remaining_amount(self):
        """Amount still owed by the reseller."""
        return (self.total_value or 0) - (self.paid_amount or 0)

    def to_dict(self):
        return {
            'id': self.id,
            'consignmentCode': self.consignment_code,
            'resellerId': self.reseller_id,
            'totalItems': self.total_items,
            'totalValue': self.total_value,
            'paidAmount': self.paid_amount,
            'status': self.status.value,
            'takenDate': self.taken_date.isoformat() if self.taken_date else None,
            'returnDate': self.return_date.isoformat() if self.return_date else None,
            'notes': self.notes,
        }

    def __repr__(self):
        return f"<Consignment(id={self.id}, code='{self.consignment_code}', status={self.status.value})>"
