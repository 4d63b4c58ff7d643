"""Document code generation (CN-1001, SL-1001, ...)."""
from sqlalchemy import func

from kaos_inventory.exceptions import ConflictError

FIRST_NUMBER = 1001


def next_code(session, column, prefix: str) -> str:
    """
    Next free `<prefix>-<n>` code for a unique code column.

    Starts after the number of existing rows and skips any value already
    taken (codes can also be supplied by callers).
    """
    count = session.query(func.count(column)).scalar() or 0
    number = FIRST_NUMBER + count
    while True:
        code = f'{prefix}-{number}'
        if not session.query(column).filter(column == code).first():
            return code
        number += 1


def claim_code(session, column, prefix: str, requested: str = None, label: str = 'Kode') -> str:
    """Use the caller's code if it is free, otherwise generate one."""
    if requested is None:
        return next_code(session, column, prefix)
    if session.query(column).filter(column == requested).first():
        raise ConflictError(f"{label} '{requested}' sudah digunakan")
    return requested
