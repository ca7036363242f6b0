"""Bookstore API.

A CRUD HTTP API over a single ``Book`` table, with the database password
fetched from Azure Key Vault at startup.
"""

__version__ = "0.1.0"
