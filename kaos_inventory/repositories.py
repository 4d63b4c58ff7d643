"""
Repository classes: the only code that issues queries for the core entities.

Each repository wraps the session handed to it by the calling service, so a
whole operation shares one transaction. Repositories flush but never commit.
"""
from sqlalchemy import or_

from kaos_inventory.models import (
    Product, Reseller, Consignment, ConsignmentItem, Sale, Activity,
    ConsignmentStatus
)


class _Repository:
    model = None

    def __init__(self, session):
        self.session = session

    def get(self, entity_id):
        return self.session.get(self.model, entity_id)

    def list(self):
        return self.session.query(self.model).order_by(self.model.id).all()

    def get_many(self, ids):
        """Batch fetch by id, returned as {id: entity}."""
        ids = set(ids)
        if not ids:
            return {}
        rows = self.session.query(self.model).filter(self.model.id.in_(ids)).all()
        return {row.id: row for row in rows}

    def create(self, **fields):
        entity = self.model(**fields)
        self.session.add(entity)
        self.session.flush()
        return entity

    def update(self, entity, **fields):
        for key, value in fields.items():
            setattr(entity, key, value)
        self.session.flush()
        return entity


class ProductRepository(_Repository):
    model = Product

    def get_by_code(self, code):
        return self.session.query(Product).filter(Product.product_code == code).first()

    def lock(self, product_id):
        """Row-lock a product for a read-modify-write of its stock."""
        return self.session.query(Product).filter(
            Product.id == product_id
        ).with_for_update().first()

    def list_low_stock(self, threshold):
        return self.session.query(Product).filter(
            Product.stock <= threshold
        ).order_by(Product.stock.asc(), Product.id.asc()).all()

    def delete(self, product):
        self.session.delete(product)
        self.session.flush()


class ResellerRepository(_Repository):
    model = Reseller


class ConsignmentRepository(_Repository):
    model = Consignment

    def get_by_code(self, code):
        return self.session.query(Consignment).filter(
            Consignment.consignment_code == code
        ).first()

    def lock(self, consignment_id):
        return self.session.query(Consignment).filter(
            Consignment.id == consignment_id
        ).with_for_update().first()

    def list_active(self):
        return self.session.query(Consignment).filter(
            or_(
                Consignment.status == ConsignmentStatus.AKTIF,
                Consignment.status == ConsignmentStatus.SEBAGIAN
            )
        ).order_by(Consignment.id).all()

    def list_taken_between(self, start, end):
        return self.session.query(Consignment).filter(
            Consignment.taken_date >= start,
            Consignment.taken_date <= end
        ).order_by(Consignment.taken_date).all()


class ConsignmentItemRepository(_Repository):
    model = ConsignmentItem

    def list_by_consignment(self, consignment_id):
        return self.session.query(ConsignmentItem).filter(
            ConsignmentItem.consignment_id == consignment_id
        ).order_by(ConsignmentItem.id).all()

    def list_by_consignments(self, consignment_ids):
        """Items for several consignments, grouped as {consignment_id: [items]}."""
        grouped = {cid: [] for cid in consignment_ids}
        if not grouped:
            return grouped
        rows = self.session.query(ConsignmentItem).filter(
            ConsignmentItem.consignment_id.in_(list(grouped))
        ).order_by(ConsignmentItem.id).all()
        for row in rows:
            grouped[row.consignment_id].append(row)
        return grouped

    def exists_for_product(self, product_id):
        return self.session.query(ConsignmentItem.id).filter(
            ConsignmentItem.product_id == product_id
        ).first() is not None


class SaleRepository(_Repository):
    model = Sale

    def get_by_code(self, code):
        return self.session.query(Sale).filter(Sale.sale_code == code).first()

    def list(self):
        return self.session.query(Sale).order_by(Sale.sale_date.desc(), Sale.id.desc()).all()

    def list_between(self, start, end):
        return self.session.query(Sale).filter(
            Sale.sale_date >= start,
            Sale.sale_date <= end
        ).order_by(Sale.sale_date).all()

    def delete(self, sale):
        self.session.delete(sale)
        self.session.flush()


class ActivityRepository(_Repository):
    model = Activity

    def list(self, limit=10):
        """Newest first, by insertion order."""
        return self.session.query(Activity).order_by(Activity.id.desc()).limit(limit).all()
