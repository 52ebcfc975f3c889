import logging
from fastapi import HTTPException, status
from vaxstock.core.exceptions import (
    ConflictError,
    InventoryError,
    NotFoundError,
    PartialAdministrationError,
    PartialReconciliationError,
    PartialWriteError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_http_exception(error: InventoryError) -> HTTPException:
    """Traduce un error del inventario a la respuesta HTTP correspondiente."""
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="El lote ha sido modificado por otra operación. Vuelve a cargarlo e inténtalo de nuevo.",
        )
    if isinstance(error, PartialWriteError):
        if isinstance(error, PartialReconciliationError):
            detail = "La conciliación se registró pero no se actualizó el lote. Revísalo manualmente."
        elif isinstance(error, PartialAdministrationError):
            detail = "La administración se registró pero no se descontaron las dosis del lote."
        else:
            detail = "Operación incompleta."
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
    if isinstance(error, PersistenceError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Error de conexión con la base de datos",
        )
    logger.error("Error de inventario no previsto: %s", error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error interno del inventario."
    )
