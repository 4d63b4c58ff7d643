"""
Unit tests for the consignment lifecycle (create, payment, return, edit).
"""

import pytest
from datetime import datetime

from kaos_inventory.exceptions import (
    ValidationError, NotFoundError, ConflictError, InsufficientStockError, BusinessLogicError
)
from kaos_inventory.models import Product, ConsignmentStatus, ConsignmentItem, Activity, ActivityType
from kaos_inventory.schemas import ConsignmentCreate, ConsignmentEdit, LineItem, ReturnLine
from kaos_inventory.services import consignment_service


def _returns(*pairs):
    return [ReturnLine(product_id=pid, return_quantity=qty) for pid, qty in pairs]


class TestCreateConsignment:
    """Tests for create_consignment."""

    def test_create_decrements_stock(self, session, product, consignment):
        """20 of 50 units consigned leaves 30 in stock."""
        session.refresh(product)
        assert product.stock == 30
        assert consignment.total_items == 20
        assert consignment.total_value == 20000
        assert consignment.paid_amount == 0
        assert consignment.status == ConsignmentStatus.AKTIF
        assert consignment.consignment_code == 'CN-1001'

    def test_create_derives_totals_from_items(self, session, reseller, make_product, consign):
        p1 = make_product(stock=40)
        p2 = make_product(stock=40)
        consignment = consign(reseller, (p1, 10, 1000), (p2, 5, 2500))

        assert consignment.total_items == 15
        assert consignment.total_value == 10 * 1000 + 5 * 2500
        items = consignment_service.get_consignment_items(session, consignment.id)
        assert [i.returned_quantity for i in items] == [0, 0]

    def test_insufficient_stock_rolls_back_every_item(self, session, reseller, make_product, consign):
        """All-or-nothing: the first item's stock is restored when the second fails."""
        plenty = make_product(stock=40)
        scarce = make_product(stock=3)

        with pytest.raises(InsufficientStockError) as exc:
            consign(reseller, (plenty, 10, 1000), (scarce, 5, 1000))

        assert exc.value.product_id == scarce.id
        assert exc.value.requested == 5
        assert exc.value.available == 3
        assert session.get(Product, plenty.id).stock == 40
        assert session.get(Product, scarce.id).stock == 3
        assert session.query(ConsignmentItem).count() == 0

    def test_empty_items_rejected(self, session, reseller):
        with pytest.raises(ValidationError):
            consignment_service.create_consignment(
                session, ConsignmentCreate(reseller_id=reseller.id, items=[])
            )

    def test_non_positive_quantity_rejected(self, session, reseller, product):
        data = ConsignmentCreate(
            reseller_id=reseller.id,
            items=[LineItem(product_id=product.id, quantity=0, price_per_item=1000)]
        )
        with pytest.raises(ValidationError):
            consignment_service.create_consignment(session, data)
        assert session.get(Product, product.id).stock == 50

    def test_total_value_above_column_limit_rejected(self, session, reseller, product):
        """Each line fits an Integer column but quantity x price does not."""
        data = ConsignmentCreate(
            reseller_id=reseller.id,
            items=[LineItem(product_id=product.id, quantity=3, price_per_item=2**30)]
        )
        with pytest.raises(ValidationError) as exc:
            consignment_service.create_consignment(session, data)

        assert exc.value.message == 'Total konsinyasi melebihi batas'
        assert session.get(Product, product.id).stock == 50
        assert session.query(ConsignmentItem).count() == 0

    def test_missing_reseller(self, session, product):
        data = ConsignmentCreate(
            reseller_id=999,
            items=[LineItem(product_id=product.id, quantity=1, price_per_item=1000)]
        )
        with pytest.raises(NotFoundError):
            consignment_service.create_consignment(session, data)

    def test_missing_product(self, session, reseller):
        data = ConsignmentCreate(
            reseller_id=reseller.id,
            items=[LineItem(product_id=999, quantity=1, price_per_item=1000)]
        )
        with pytest.raises(NotFoundError):
            consignment_service.create_consignment(session, data)

    def test_duplicate_code_conflicts(self, session, reseller, product, consignment):
        data = ConsignmentCreate(
            reseller_id=reseller.id,
            consignment_code=consignment.consignment_code,
            items=[LineItem(product_id=product.id, quantity=1, price_per_item=1000)]
        )
        with pytest.raises(ConflictError):
            consignment_service.create_consignment(session, data)
        assert session.get(Product, product.id).stock == 30

    def test_activity_logged(self, session, consignment):
        activity = session.query(Activity).filter(
            Activity.activity_type == ActivityType.KONSINYASI,
            Activity.description.like('Konsinyasi baru%')
        ).one()
        assert activity.description == 'Konsinyasi baru: Budi Santoso (20 pcs)'
        assert activity.related_id == consignment.id


class TestProcessPayment:
    """Tests for process_payment."""

    def test_full_payment_marks_lunas(self, session, consignment):
        """Paying the full value settles the consignment."""
        consignment_service.process_payment(session, consignment.id, 20000)

        session.refresh(consignment)
        assert consignment.status == ConsignmentStatus.LUNAS
        assert consignment.paid_amount == 20000

    def test_partial_payments(self, session, consignment):
        consignment_service.process_payment(session, consignment.id, 5000)
        assert consignment.status == ConsignmentStatus.SEBAGIAN
        assert consignment.paid_amount == 5000

        consignment_service.process_payment(session, consignment.id, 15000)
        assert consignment.status == ConsignmentStatus.LUNAS
        assert consignment.paid_amount == 20000

    def test_payment_does_not_touch_stock(self, session, product, consignment):
        consignment_service.process_payment(session, consignment.id, 5000)
        assert session.get(Product, product.id).stock == 30

    @pytest.mark.parametrize('amount', [0, -100])
    def test_non_positive_amount_rejected(self, session, consignment, amount):
        with pytest.raises(ValidationError) as exc:
            consignment_service.process_payment(session, consignment.id, amount)
        assert exc.value.message == 'Jumlah pembayaran harus positif'
        session.refresh(consignment)
        assert consignment.paid_amount == 0

    def test_overpayment_rejected(self, session, consignment):
        consignment_service.process_payment(session, consignment.id, 15000)

        with pytest.raises(ValidationError) as exc:
            consignment_service.process_payment(session, consignment.id, 6000)
        assert exc.value.payload['remaining'] == 5000
        session.refresh(consignment)
        assert consignment.paid_amount == 15000
        assert consignment.status == ConsignmentStatus.SEBAGIAN

    def test_payment_on_lunas_rejected(self, session, consignment):
        consignment_service.process_payment(session, consignment.id, 20000)
        with pytest.raises(ValidationError):
            consignment_service.process_payment(session, consignment.id, 1)

    def test_missing_consignment(self, session):
        with pytest.raises(NotFoundError):
            consignment_service.process_payment(session, 999, 1000)

    def test_payment_logged_as_sale_activity(self, session, consignment):
        consignment_service.process_payment(session, consignment.id, 5000)
        activity = session.query(Activity).filter(
            Activity.activity_type == ActivityType.PENJUALAN
        ).one()
        assert activity.description == 'Pembayaran konsinyasi: Budi Santoso (5000)'
        assert activity.related_id == consignment.id


class TestProcessReturn:
    """Tests for process_return."""

    def test_full_return_restores_stock(self, session, product, consignment):
        """Returning every unit puts it back in stock and closes the consignment."""
        consignment_service.process_return(session, consignment.id, _returns((product.id, 20)))

        session.refresh(product)
        session.refresh(consignment)
        item = consignment_service.get_consignment_items(session, consignment.id)[0]
        assert product.stock == 50
        assert item.returned_quantity == 20
        assert consignment.status == ConsignmentStatus.RETURN
        assert consignment.return_date is not None

    def test_partial_return_keeps_status(self, session, product, consignment):
        consignment_service.process_return(session, consignment.id, _returns((product.id, 5)))

        session.refresh(consignment)
        assert consignment.status == ConsignmentStatus.AKTIF
        assert consignment.return_date is None
        assert session.get(Product, product.id).stock == 35

    def test_over_return_rejected(self, session, product, consignment):
        """Nothing changes when a quantity exceeds what is still out."""
        consignment_service.process_return(session, consignment.id, _returns((product.id, 15)))

        with pytest.raises(ValidationError) as exc:
            consignment_service.process_return(session, consignment.id, _returns((product.id, 6)))
        assert exc.value.message == 'Jumlah pengembalian melebihi jumlah tersedia (5)'

        item = consignment_service.get_consignment_items(session, consignment.id)[0]
        session.refresh(item)
        assert item.returned_quantity == 15
        assert session.get(Product, product.id).stock == 45

    def test_failed_entry_leaves_earlier_entries_unapplied(self, session, reseller, make_product, consign):
        p1 = make_product(stock=20)
        p2 = make_product(stock=20)
        consignment = consign(reseller, (p1, 10, 1000), (p2, 10, 1000))

        with pytest.raises(ValidationError):
            consignment_service.process_return(
                session, consignment.id, _returns((p1.id, 4), (p2.id, 11))
            )

        items = consignment_service.get_consignment_items(session, consignment.id)
        assert [i.returned_quantity for i in items] == [0, 0]
        assert session.get(Product, p1.id).stock == 10

    def test_duplicate_entries_checked_cumulatively(self, session, product, consignment):
        with pytest.raises(ValidationError):
            consignment_service.process_return(
                session, consignment.id, _returns((product.id, 12), (product.id, 12))
            )
        assert session.get(Product, product.id).stock == 30

    def test_split_return_matches_single_return(self, session, reseller, make_product, consign):
        """Two returns of 7 + 8 end where a single return of 15 ends."""
        split_product = make_product(stock=30)
        single_product = make_product(stock=30)
        split = consign(reseller, (split_product, 20, 1000))
        single = consign(reseller, (single_product, 20, 1000))

        consignment_service.process_return(session, split.id, _returns((split_product.id, 7)))
        consignment_service.process_return(session, split.id, _returns((split_product.id, 8)))
        consignment_service.process_return(session, single.id, _returns((single_product.id, 15)))

        split_item = consignment_service.get_consignment_items(session, split.id)[0]
        single_item = consignment_service.get_consignment_items(session, single.id)[0]
        assert split_item.returned_quantity == single_item.returned_quantity == 15
        assert session.get(Product, split_product.id).stock == session.get(Product, single_product.id).stock
        assert split.status == single.status == ConsignmentStatus.AKTIF

    def test_return_status_needs_every_item(self, session, reseller, make_product, consign):
        p1 = make_product(stock=20)
        p2 = make_product(stock=20)
        consignment = consign(reseller, (p1, 5, 1000), (p2, 5, 1000))

        consignment_service.process_return(session, consignment.id, _returns((p1.id, 5)))
        assert consignment.status == ConsignmentStatus.AKTIF

        consignment_service.process_return(session, consignment.id, _returns((p2.id, 5)))
        assert consignment.status == ConsignmentStatus.RETURN

    def test_product_not_in_consignment(self, session, consignment, make_product):
        other = make_product(stock=10)
        with pytest.raises(ValidationError) as exc:
            consignment_service.process_return(session, consignment.id, _returns((other.id, 1)))
        assert exc.value.message == f'Produk dengan ID {other.id} tidak ada dalam konsinyasi ini'

    def test_empty_list_rejected(self, session, consignment):
        with pytest.raises(ValidationError):
            consignment_service.process_return(session, consignment.id, [])

    def test_non_positive_quantity_rejected(self, session, product, consignment):
        with pytest.raises(ValidationError):
            consignment_service.process_return(session, consignment.id, _returns((product.id, 0)))

    def test_return_after_lunas_rejected(self, session, product, consignment):
        consignment_service.process_payment(session, consignment.id, 20000)
        with pytest.raises(ValidationError):
            consignment_service.process_return(session, consignment.id, _returns((product.id, 1)))
        assert session.get(Product, product.id).stock == 30

    def test_missing_consignment(self, session, product):
        with pytest.raises(NotFoundError):
            consignment_service.process_return(session, 999, _returns((product.id, 1)))

    def test_return_activity(self, session, product, consignment):
        consignment_service.process_return(session, consignment.id, _returns((product.id, 4)))
        activity = session.query(Activity).filter(
            Activity.activity_type == ActivityType.RETURN
        ).one()
        assert activity.description == 'Pengembalian konsinyasi: Budi Santoso (4 pcs)'


class TestConservation:
    """Units are never created or lost by the consignment protocol."""

    def test_stock_plus_outstanding_is_constant(self, session, reseller, make_product, consign):
        product = make_product(stock=60)
        first = consign(reseller, (product, 25, 1000))
        second = consign(reseller, (product, 10, 1000))
        consignment_service.process_return(session, first.id, _returns((product.id, 9)))
        consignment_service.process_payment(session, second.id, 4000)
        consignment_service.process_return(session, second.id, _returns((product.id, 10)))

        items = session.query(ConsignmentItem).filter(ConsignmentItem.product_id == product.id).all()
        outstanding = sum(i.quantity - i.returned_quantity for i in items)
        assert session.get(Product, product.id).stock + outstanding == 60


class TestEditConsignment:
    """Tests for the administrative edit."""

    def test_edit_overwrites_fields(self, session, consignment):
        taken = datetime(2024, 1, 15, 10, 0)
        consignment_service.edit_consignment(session, consignment.id, ConsignmentEdit(
            notes='Koreksi', total_value=18000, taken_date=taken, status=ConsignmentStatus.LUNAS
        ))

        session.refresh(consignment)
        assert consignment.notes == 'Koreksi'
        assert consignment.total_value == 18000
        assert consignment.taken_date == taken
        assert consignment.status == ConsignmentStatus.LUNAS
        assert consignment.paid_amount == 0

    def test_edit_is_logged(self, session, consignment):
        consignment_service.edit_consignment(session, consignment.id, ConsignmentEdit(notes='x'))
        activity = session.query(Activity).filter(
            Activity.description == f'Koreksi konsinyasi {consignment.consignment_code}'
        ).one()
        assert activity.activity_type == ActivityType.KONSINYASI

    def test_edit_rejects_unknown_fields(self):
        with pytest.raises(Exception):
            ConsignmentEdit(paid_amount=100)

    @pytest.mark.parametrize('field', ['total_items', 'total_value'])
    def test_edit_rejects_null_totals(self, field):
        with pytest.raises(Exception):
            ConsignmentEdit(**{field: None})

    def test_edit_missing(self, session):
        with pytest.raises(NotFoundError):
            consignment_service.edit_consignment(session, 999, ConsignmentEdit(notes='x'))


class TestQueries:
    """Tests for read helpers and detail serialization."""

    def test_list_active_excludes_terminal(self, session, reseller, product, consign):
        open_one = consign(reseller, (product, 5, 1000))
        paid = consign(reseller, (product, 5, 1000))
        consignment_service.process_payment(session, paid.id, 5000)

        active = consignment_service.list_active_consignments(session)
        assert [c.id for c in active] == [open_one.id]

    def test_detail_attaches_reseller_and_products(self, session, reseller, product, consignment):
        detail = consignment_service.consignment_detail(session, consignment)

        assert detail['reseller']['name'] == reseller.name
        assert detail['remainingAmount'] == 20000
        assert detail['items'][0]['product']['productCode'] == product.product_code
        assert detail['items'][0]['quantity'] == 20

    def test_get_by_code(self, session, consignment):
        found = consignment_service.get_consignment_by_code(session, 'CN-1001')
        assert found.id == consignment.id

    def test_get_missing(self, session):
        with pytest.raises(NotFoundError):
            consignment_service.get_consignment(session, 999)


class TestErrorTaxonomy:
    """Error classes map to the expected status codes."""

    def test_status_codes(self, product):
        assert ValidationError('x').status_code == 400
        assert ConflictError('x').status_code == 409
        assert NotFoundError().status_code == 404
        error = InsufficientStockError(product, requested=5, available=2)
        assert error.status_code == 400
        assert isinstance(error, BusinessLogicError)
        assert error.to_dict() == {
            'productId': product.id,
            'requested': 5,
            'available': 2,
            'message': 'Stok tidak cukup untuk Kaos Dewasa L (tersedia: 2)',
            'status': 'error',
        }
