"""
Dependencias para inyeccion de casos de uso.
"""
from airtable_pg.application.use_cases.record_use_cases import RecordUseCases
from airtable_pg.infrastructure.database.pool_registry import pool_registry


def get_record_use_cases() -> RecordUseCases:
    """
    Dependencia para obtener los casos de uso de records.

    Returns:
        RecordUseCases: casos de uso sobre el registro global de pools
    """
    return RecordUseCases(pool_registry)
