"""
Activity model: append-only audit trail of every state-changing operation.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, Text, DateTime, Enum
from kaos_inventory.database import Base
from kaos_inventory.models.enums import ActivityType, enum_values


class Activity(Base):
    """Activity log entry. Never updated or deleted."""

    __tablename__ = 'activity'

    id = Column(Integer, primary_key=True, autoincrement=True)
    activity_type = Column(
        Enum(ActivityType, name='activity_type', values_callable=enum_values),
        nullable=False,
        index=True
    )
    description = Column(Text, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.now, index=True)
    related_id = Column(Integer, nullable=True)  # ID of the entity the entry refers to

    def to_dict(self):
        return {
            'id': self.id,
            'activityType': self.activity_type.value,
            'description': self.description,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'relatedId': self.related_id,
        }

    def __repr__(self):
        return f"<Activity {self.activity_type.value}: {self.description}>"
