"""Reseller registry service."""
from kaos_inventory.exceptions import NotFoundError
from kaos_inventory.models import ActivityType
from kaos_inventory.repositories import ResellerRepository
from kaos_inventory.schemas import ResellerCreate, ResellerUpdate
from kaos_inventory.services.activity_service import log_activity
from kaos_inventory.services.transaction import transactional


def get_reseller(session, reseller_id: int):
    reseller = ResellerRepository(session).get(reseller_id)
    if not reseller:
        raise NotFoundError(f'Reseller dengan ID {reseller_id} tidak ditemukan')
    return reseller


def list_resellers(session):
    return ResellerRepository(session).list()


@transactional
def create_reseller(session, data: ResellerCreate):
    reseller = ResellerRepository(session).create(
        name=data.name,
        phone=data.phone,
        address=data.address
    )
    log_activity(
        session,
        ActivityType.KONSINYASI,
        f'Reseller baru: {reseller.name}',
        related_id=reseller.id
    )
    return reseller


@transactional
def update_reseller(session, reseller_id: int, data: ResellerUpdate):
    """Update contact details (phone, address). The name is fixed after creation."""
    reseller = get_reseller(session, reseller_id)
    changes = data.changes()
    if changes:
        ResellerRepository(session).update(reseller, **changes)
        log_activity(
            session,
            ActivityType.KONSINYASI,
            f'Data reseller diperbarui: {reseller.name}',
            related_id=reseller.id
        )
    return reseller
