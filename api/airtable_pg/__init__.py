"""
Gateway compatible con Airtable sobre PostgreSQL.
"""
__version__ = "1.0.0"
