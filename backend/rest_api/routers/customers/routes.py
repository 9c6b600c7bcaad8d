"""
Customer router: profile and saved addresses.
All routes need the customer's own session token.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common import ok
from rest_api.services.domain import CustomerService
from shared.config.constants import Role
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_account
from shared.utils.schemas import (
    AddressCreate,
    AddressOutput,
    CustomerProfileOutput,
    Envelope,
    MessageOutput,
)


router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("/{customer_id}/profile", response_model=Envelope[CustomerProfileOutput])
def get_profile(
    customer_id: int,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[CustomerProfileOutput]:
    require_account(ctx, Role.CUSTOMER, customer_id)
    return ok(CustomerService(db).get_profile(customer_id))


@router.get("/{customer_id}/addresses", response_model=Envelope[list[AddressOutput]])
def list_addresses(
    customer_id: int,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[list[AddressOutput]]:
    require_account(ctx, Role.CUSTOMER, customer_id)
    return ok(CustomerService(db).list_addresses(customer_id))


@router.post(
    "/{customer_id}/addresses",
    response_model=Envelope[AddressOutput],
    status_code=status.HTTP_201_CREATED,
)
def add_address(
    customer_id: int,
    body: AddressCreate,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[AddressOutput]:
    require_account(ctx, Role.CUSTOMER, customer_id)
    return ok(CustomerService(db).add_address(customer_id, body), message="Address saved")


@router.delete("/{customer_id}/addresses/{address_id}", response_model=Envelope[MessageOutput])
def delete_address(
    customer_id: int,
    address_id: int,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[MessageOutput]:
    require_account(ctx, Role.CUSTOMER, customer_id)
    CustomerService(db).delete_address(customer_id, address_id)
    return ok(message="Address deleted")
