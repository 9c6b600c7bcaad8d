"""
Customer Service: profile and saved addresses.
"""

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Customer, CustomerAddress, Order
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import AddressCreate, AddressOutput, CustomerProfileOutput

logger = get_logger(__name__)


class CustomerService:
    def __init__(self, db: Session):
        self._db = db

    def get_customer(self, customer_id: int) -> Customer:
        customer = self._db.scalar(
            select(Customer)
            .options(selectinload(Customer.addresses))
            .where(Customer.id == customer_id, Customer.is_active.is_(True))
        )
        if customer is None:
            raise NotFoundError("Customer", customer_id)
        return customer

    def get_profile(self, customer_id: int) -> CustomerProfileOutput:
        customer = self.get_customer(customer_id)
        total_orders = self._db.scalar(
            select(func.count(Order.id)).where(
                Order.is_active.is_(True),
                or_(Order.customer_id == customer.id, Order.customer_email == customer.email),
            )
        ) or 0
        return CustomerProfileOutput(
            id=customer.id,
            name=customer.name,
            email=customer.email,
            phone=customer.phone,
            email_verified=customer.email_verified,
            last_login=customer.last_login,
            addresses=self._addresses(customer),
            total_orders=total_orders,
        )

    def list_addresses(self, customer_id: int) -> list[AddressOutput]:
        return self._addresses(self.get_customer(customer_id))

    def add_address(self, customer_id: int, body: AddressCreate) -> AddressOutput:
        """Save an address. The first one, or one marked default, becomes the default."""
        customer = self.get_customer(customer_id)
        make_default = body.is_default or not customer.addresses
        if make_default:
            for existing in customer.addresses:
                existing.is_default = False

        address = CustomerAddress(**body.model_dump(exclude={"is_default"}), is_default=make_default)
        customer.addresses.append(address)
        safe_commit(self._db)
        self._db.refresh(address)

        logger.info("Customer address added", customer_id=customer.id, address_id=address.id)
        return AddressOutput.model_validate(address, from_attributes=True)

    def delete_address(self, customer_id: int, address_id: int) -> None:
        customer = self.get_customer(customer_id)
        address = next((a for a in customer.addresses if a.id == address_id), None)
        if address is None:
            raise NotFoundError("Address", address_id, customer_id=customer_id)

        was_default = address.is_default
        customer.addresses.remove(address)
        if was_default and customer.addresses:
            customer.addresses[0].is_default = True
        safe_commit(self._db)

        logger.info("Customer address deleted", customer_id=customer.id, address_id=address_id)

    @staticmethod
    def _addresses(customer: Customer) -> list[AddressOutput]:
        return [AddressOutput.model_validate(a, from_attributes=True) for a in customer.addresses]
