"""
Adaptador fluido con la misma forma que el SDK de Airtable:

    base = create_base("haq_scoring")
    records = base("reports").select(filterByFormula="{status} = 'active'").first_page()
"""
from airtable_pg.adapter.base import AirtableBase, create_base, create_base_from_id
from airtable_pg.adapter.query import AirtableQuery
from airtable_pg.adapter.table import AirtableTable

__all__ = [
    "AirtableBase",
    "AirtableQuery",
    "AirtableTable",
    "create_base",
    "create_base_from_id",
]
