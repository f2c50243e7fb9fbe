"""CRUD API for the patients, visits and medications of a medical practice."""

__version__ = "0.1.0"
