"""Product repositories package.

``ProductDjangoRepository`` lives in
``modules.products.repositories.django_repository``.
"""

from modules.products.repositories.interfaces import IProductRepository
from modules.products.repositories.memory_repository import InMemoryProductRepository

__all__ = ["IProductRepository", "InMemoryProductRepository"]
