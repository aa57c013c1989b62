"""Biblioteca - library management package

This package contains the application modules including:
- Loan and fine engines (services/loans.py, services/fines.py)
- Catalog management for authors, categories, books and users (services/catalog.py)
- Flat-file JSON record store (storage.py)
- Data models (models.py)
- CLI interface and interactive menu (main.py)
"""

from biblioteca.library import Library

__all__ = ["Library"]
