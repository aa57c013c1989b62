"""Library services.

- Loan engine (loans.py): checkout and return
- Fine engine (fines.py): fines and the pending-fine counter
- Catalog (catalog.py): authors, categories, books and users
"""

from .base import Service
from .catalog import CatalogService
from .fines import FineService
from .loans import LoanService

__all__ = ["Service", "CatalogService", "FineService", "LoanService"]
