"""
Service error to HTTP status mapping
"""
import pytest
from fastapi import HTTPException
from sqlalchemy.orm.exc import StaleDataError

from hotelpms.domain.errors import InvalidAmount, InvalidTransition, NotAvailable
from hotelpms.routers.errors import service_errors
from hotelpms.services.errors import NotFoundError


@pytest.mark.parametrize("error, status_code", [
    (NotFoundError("Room", 7), 404),
    (InvalidTransition("no"), 409),
    (NotAvailable("taken"), 409),
    (InvalidAmount("negative"), 400),
    (StaleDataError("stale"), 409),
    (ValueError("bad"), 400),
])
def test_mapping(error, status_code):
    with pytest.raises(HTTPException) as exc_info:
        with service_errors():
            raise error
    assert exc_info.value.status_code == status_code


def test_other_errors_propagate():
    with pytest.raises(KeyError):
        with service_errors():
            raise KeyError("x")


def test_not_found_detail():
    with pytest.raises(HTTPException) as exc_info:
        with service_errors():
            raise NotFoundError("Booking", 12)
    assert "Booking" in exc_info.value.detail
