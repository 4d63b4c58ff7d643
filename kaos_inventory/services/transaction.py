"""Transaction boundary shared by the mutating services."""
import logging
from functools import wraps

from kaos_inventory.exceptions import KaosError

logger = logging.getLogger(__name__)

_IN_OPERATION = 'kaos_in_operation'


def transactional(func):
    """
    Run a service operation as one unit of work: commit on success,
    rollback on any error and re-raise.

    The wrapped function takes the session as its first argument. A call made
    from inside another transactional operation joins the outer unit of work
    instead of committing on its own.
    """
    @wraps(func)
    def wrapper(session, *args, **kwargs):
        if session.info.get(_IN_OPERATION):
            return func(session, *args, **kwargs)

        session.info[_IN_OPERATION] = True
        try:
            result = func(session, *args, **kwargs)
            session.commit()
            return result
        except KaosError:
            session.rollback()
            raise
        except Exception as e:
            session.rollback()
            logger.error(f"Error in {func.__name__}: {e}", exc_info=True)
            raise
        finally:
            session.info.pop(_IN_OPERATION, None)

    return wrapper
