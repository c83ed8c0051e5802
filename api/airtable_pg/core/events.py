"""
Manejadores de eventos de inicio y cierre de la aplicacion.
"""
from typing import Callable

from fastapi import FastAPI
from loguru import logger

from airtable_pg.core.config import get_base_map, get_schema_search_path, settings
from airtable_pg.infrastructure.database.pool_registry import pool_registry


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Los pools NO se abren aqui: el registro los crea en el primer request a
    cada base.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Inicializa recursos al inicio de la aplicacion."""
        try:
            logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
            logger.info(f"Entorno: {settings.ENVIRONMENT}")

            _validate_config()

            logger.add(
                settings.LOG_FILE,
                rotation="500 MB",
                retention="10 days",
                level=settings.LOG_LEVEL
            )

            logger.success("Aplicacion iniciada correctamente")
        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


def _validate_config() -> None:
    """Valida que la configuracion critica este presente."""
    warnings = []

    base_map = get_base_map(settings.BASE_MAP)
    if not base_map:
        warnings.append("BASE_MAP vacio - todas las bases responderan 404")
    else:
        logger.info(f"Bases configuradas: {', '.join(sorted(base_map.values()))}")

    if not get_schema_search_path(settings.DB_SCHEMAS):
        warnings.append("DB_SCHEMAS vacio - ninguna tabla sera visible")

    if not settings.DATABASE_URL and not settings.DATABASE_PASSWORD:
        warnings.append("DATABASE_PASSWORD no configurada")

    if settings.FORMULA_STRICT:
        logger.info("filterByFormula en modo estricto")

    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Libera recursos al cerrar la aplicacion."""
        logger.info("Cerrando aplicacion...")

        closed_pools = pool_registry.close_all()
        logger.info(f"Pools de conexiones cerrados: {closed_pools}")

        logger.success("Aplicacion cerrada correctamente")

    return shutdown
