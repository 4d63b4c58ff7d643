"""
Request schemas (pydantic) for the JSON API.

The update schemas double as the explicit update structs accepted by the
services: they list the only fields a caller may change on each entity.
Field names are snake_case in Python and camelCase on the wire.

Integer fields are strict (JSON booleans, floats and numeric strings are
rejected) and bounded to what an Integer column holds.
"""
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from kaos_inventory.models import ShirtType, ShirtSize, ConsignmentStatus

# Largest value of a 32-bit Integer column (PostgreSQL INTEGER)
MAX_INT = 2**31 - 1

Amount = Annotated[int, Field(strict=True, ge=-MAX_INT, le=MAX_INT)]
Count = Annotated[int, Field(strict=True, ge=0, le=MAX_INT)]
RecordId = Annotated[int, Field(strict=True, gt=0, le=MAX_INT)]


class ApiSchema(BaseModel):
    """Base schema: camelCase aliases, unknown fields rejected."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
        str_strip_whitespace=True,
    )

    def changes(self):
        """Fields explicitly present in the request."""
        return self.model_dump(exclude_unset=True)


# =====================================================
# PRODUCTS
# =====================================================

class ProductCreate(ApiSchema):
    product_code: str = Field(min_length=1, max_length=50)
    type: ShirtType
    size: ShirtSize
    stock: Count = 0
    price: Count = 0
    notes: Optional[str] = None


class ProductUpdate(ApiSchema):
    """Editable product fields. A new stock value is applied as a ledger adjustment."""
    product_code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    type: Optional[ShirtType] = None
    size: Optional[ShirtSize] = None
    stock: Optional[Count] = None
    price: Optional[Count] = None
    notes: Optional[str] = None


# =====================================================
# RESELLERS
# =====================================================

class ResellerCreate(ApiSchema):
    name: str = Field(min_length=1, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None


class ResellerUpdate(ApiSchema):
    """Only contact details change after creation."""
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None


# =====================================================
# CONSIGNMENTS
# =====================================================

class LineItem(ApiSchema):
    """Quantity and price signs are checked by the services."""
    product_id: RecordId
    quantity: Amount
    price_per_item: Amount


class ConsignmentCreate(ApiSchema):
    reseller_id: RecordId
    items: List[LineItem]
    consignment_code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    notes: Optional[str] = None


class PaymentRequest(ApiSchema):
    amount: Amount
    notes: Optional[str] = None


class ReturnLine(ApiSchema):
    product_id: RecordId
    return_quantity: Amount


class ReturnRequest(ApiSchema):
    items: List[ReturnLine]
    notes: Optional[str] = None


class ConsignmentEdit(ApiSchema):
    """
    Administrative correction of a consignment record.

    Values are written as given; totals are not re-derived from the items.
    """
    notes: Optional[str] = None
    total_items: Optional[Count] = None
    total_value: Optional[Count] = None
    taken_date: Optional[datetime] = None
    status: Optional[ConsignmentStatus] = None

    @field_validator('total_items', 'total_value', 'taken_date', 'status')
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError('tidak boleh kosong')
        return value


# =====================================================
# SALES
# =====================================================

class DirectSaleCreate(ApiSchema):
    items: List[LineItem]
    sale_code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    notes: Optional[str] = None


class ConsignmentSaleCreate(ApiSchema):
    consignment_id: RecordId
    amount: Amount
    sale_code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    notes: Optional[str] = None
