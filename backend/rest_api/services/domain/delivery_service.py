"""
Delivery Partner Service.

Location and availability are the two inputs to assignment: only
available couriers with a known location are ever candidates.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import DeliveryPerson
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import NotFoundError
from shared.utils.otp import utcnow
from shared.utils.schemas import DeliveryPersonOutput

logger = get_logger(__name__)


class DeliveryService:
    """Courier profile, location and availability."""

    def __init__(self, db: Session):
        self._db = db

    def get_delivery_person(self, delivery_person_id: int) -> DeliveryPerson:
        person = self._db.scalar(
            select(DeliveryPerson).where(
                DeliveryPerson.id == delivery_person_id,
                DeliveryPerson.is_active.is_(True),
            )
        )
        if person is None:
            raise NotFoundError("Delivery person", delivery_person_id)
        return person

    def get_profile(self, delivery_person_id: int) -> DeliveryPersonOutput:
        return DeliveryPersonOutput.model_validate(
            self.get_delivery_person(delivery_person_id), from_attributes=True
        )

    def update_location(self, delivery_person_id: int, latitude: float, longitude: float) -> DeliveryPersonOutput:
        person = self.get_delivery_person(delivery_person_id)
        person.latitude = latitude
        person.longitude = longitude
        person.location_updated_at = utcnow()
        safe_commit(self._db)
        self._db.refresh(person)

        logger.debug("Courier location updated", delivery_person_id=person.id)
        return DeliveryPersonOutput.model_validate(person, from_attributes=True)

    def update_availability(self, delivery_person_id: int, is_available: bool) -> DeliveryPersonOutput:
        person = self.get_delivery_person(delivery_person_id)
        person.is_available = is_available
        safe_commit(self._db)
        self._db.refresh(person)

        logger.info("Courier availability changed", delivery_person_id=person.id, is_available=is_available)
        return DeliveryPersonOutput.model_validate(person, from_attributes=True)
