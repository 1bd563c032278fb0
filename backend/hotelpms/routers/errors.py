"""
Translate service and engine errors into HTTP responses
"""
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.orm.exc import StaleDataError

from hotelpms.domain.errors import SettlementError
from hotelpms.services.errors import NotFoundError


@contextmanager
def service_errors():
    """
    Wrap a service call made from a route

    NotFoundError -> 404, SettlementError -> its own status code,
    StaleDataError -> 409, any other ValueError -> 400.
    """
    try:
        yield
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except SettlementError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except StaleDataError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Record was modified by another request, reload and retry"
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
