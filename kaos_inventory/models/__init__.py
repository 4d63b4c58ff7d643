"""Models package - exports all SQLAlchemy models."""
from kaos_inventory.models.enums import ShirtType, ShirtSize, ConsignmentStatus, ActivityType
from kaos_inventory.models.product import Product
from kaos_inventory.models.reseller import Reseller
from kaos_inventory.models.consignment import Consignment
from kaos_inventory.models.consignment_item import ConsignmentItem
from kaos_inventory.models.sale import Sale
from kaos_inventory.models.activity import Activity

__all__ = [
    'ShirtType', 'ShirtSize', 'ConsignmentStatus', 'ActivityType',
    'Product', 'Reseller', 'Consignment', 'ConsignmentItem', 'Sale', 'Activity',
]
