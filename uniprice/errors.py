# ==============================================================================
# EXCEPCIONES DEL DOMINIO
# ==============================================================================
# Taxonomía de errores:
#   SyncError       → falla de suscripción remota (siempre degrada a modo local)
#   WriteError      → falla de escritura remota (solo afecta a la acción)
#   ValidationError → campo requerido faltante o inválido
#   UploadError     → falla al subir imagen a Drive
#   AIServiceError  → falla de Gemini (sugerencias / visión)
# ==============================================================================


class UnipriceError(Exception):
    """Error base de la aplicación."""


class SyncError(UnipriceError):
    """No se pudo abrir o mantener una suscripción remota."""


class WriteError(UnipriceError):
    """Una escritura remota (producto, config, pedido) falló."""


class ValidationError(UnipriceError):
    """Datos de entrada inválidos."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class UploadError(UnipriceError):
    """La subida de imagen falló."""


class AIServiceError(UnipriceError):
    """El servicio generativo falló o respondió algo no parseable."""
