"""
Utilidades de fechas para createdTime.

Airtable serializa createdTime en UTC con milisegundos y sufijo 'Z'
(2026-01-28T10:15:00.000Z); las filas pueden traer datetime o texto.
"""
from datetime import datetime, timezone
from typing import Any


class DateTimeUtils:
    """Clase de utilidades para operaciones con fechas y horas."""

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """
        Convierte un datetime al formato de createdTime.

        Args:
            dt: Objeto datetime (naive se asume UTC)

        Returns:
            str: p.ej. 2026-01-28T10:15:00.000Z
        """
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        dt = dt.astimezone(timezone.utc)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"

    @classmethod
    def created_time(cls, raw: Any) -> str:
        """
        createdTime de una fila: datetime se formatea, texto se respeta tal
        cual y vacio equivale a "ahora".
        """
        if isinstance(raw, datetime):
            return cls.to_iso_string(raw)
        if raw:
            return str(raw)
        return cls.to_iso_string(cls.now_utc())
