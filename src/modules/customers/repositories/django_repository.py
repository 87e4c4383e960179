"""Django ORM implementation of the Customer repository.

Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising, the service layer decides how to translate a
missing entity.
"""

from __future__ import annotations

from typing import Optional

import structlog

from django.core.exceptions import ValidationError

from modules.customers.dtos import CustomerDTO
from modules.customers.models import Customer
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[CustomerDTO]:
        """Retrieve a customer by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            customer = Customer.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            logger.debug("customer.invalid_id", customer_id=str(id))
            return None
        if customer is None:
            return None
        return CustomerDTO.from_entity(customer)
