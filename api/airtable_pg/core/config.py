"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.

Las credenciales de PostgreSQL no tienen defaults de produccion: se leen
desde el entorno (o desde .env) en cada despliegue.
"""
import json
from typing import Dict, List

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    Base de datos:
    - DATABASE_URL se puede especificar completa o por componentes.
    - El nombre de la base NO forma parte de la URL: cada base Airtable
      (BASE_MAP) apunta a una base PostgreSQL distinta y el registro de
      pools agrega el dbname al abrir el pool.
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="Airtable PG Gateway")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Base de datos - Componentes separados
    DATABASE_HOST: str = Field(default="localhost")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_USER: str = Field(default="postgres")
    DATABASE_PASSWORD: str = Field(default="")
    DATABASE_SSLMODE: str = Field(default="prefer")

    # Base de datos - URL completa (override de componentes si se proporciona)
    DATABASE_URL: str = Field(default="")
    DB_POOL_MIN_SIZE: int = Field(default=1)
    DB_POOL_MAX_SIZE: int = Field(default=10)
    DB_POOL_TIMEOUT: float = Field(default=30.0)

    # Schemas donde se buscan las tablas (search path para introspeccion)
    DB_SCHEMAS: str = Field(default="scoring,public")

    # Mapeo Airtable base id -> base PostgreSQL (JSON)
    BASE_MAP: str = Field(
        default=(
            '{"appgiPT2PnR2JrVzI": "haq_scoring", '
            '"appwE6FXQqpSz7eRh": "haq_ontology", '
            '"app42HAczcSBeZOxD": "haq_knowledge"}'
        )
    )

    # Override opcional del mapeo de linked records (JSON):
    # {"report_id": {"table": "reports", "lookup_column": "report_id"}}
    LINKED_RECORD_MAP: str = Field(default="")

    # Paginacion
    DEFAULT_PAGE_SIZE: int = Field(default=1000)
    MAX_PAGE_SIZE: int = Field(default=10000)
    SDK_FIRST_PAGE_SIZE: int = Field(default=100)

    # Formulas: si es True, la sintaxis no reconocida es un error (400)
    FORMULA_STRICT: bool = Field(default=False)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """
        Retorna la conninfo base (sin dbname).
        Si DATABASE_URL esta definida, la usa directamente.
        Si no, construye la conninfo desde los componentes individuales.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"host={self.DATABASE_HOST} port={self.DATABASE_PORT} "
            f"user={self.DATABASE_USER} password={self.DATABASE_PASSWORD} "
            f"sslmode={self.DATABASE_SSLMODE}"
        )

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_schema_search_path(schemas_string: str) -> List[str]:
    """
    Parsea DB_SCHEMAS ("scoring, public") a una lista de schemas.
    """
    return [s.strip() for s in schemas_string.split(",") if s.strip()]


def get_base_map(base_map_string: str) -> Dict[str, str]:
    """
    Parsea BASE_MAP. Acepta JSON o pares "appId=database" separados por coma.
    """
    if not base_map_string.strip():
        return {}
    try:
        return dict(json.loads(base_map_string))
    except json.JSONDecodeError:
        pairs = [p.split("=", 1) for p in base_map_string.split(",") if "=" in p]
        return {k.strip(): v.strip() for k, v in pairs}


# Instancia global de configuracion
settings = Settings()
