"""Customer repositories package.

``CustomerDjangoRepository`` lives in
``modules.customers.repositories.django_repository`` and is imported
from there, so the in-memory adapter stays usable without Django apps
being loaded.
"""

from modules.customers.repositories.interfaces import ICustomerRepository
from modules.customers.repositories.memory_repository import InMemoryCustomerRepository

__all__ = ["ICustomerRepository", "InMemoryCustomerRepository"]
