"""
Casos de uso de la aplicacion.
"""
from .record_use_cases import OperationResult, RecordUseCases

__all__ = ["OperationResult", "RecordUseCases"]
