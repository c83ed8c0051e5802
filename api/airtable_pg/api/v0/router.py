"""
Router principal de la API v0 (misma version de path que Airtable).
"""
from fastapi import APIRouter

from airtable_pg.api.v0.endpoints import records


api_router = APIRouter(prefix="/v0")

api_router.include_router(records.router)
