# ==============================================================================
# CONFIGURACIÓN DE LA APLICACIÓN
# ==============================================================================
# Todas las opciones vienen de variables de entorno (archivo .env opcional).
# create_app() copia estos valores a app.config y acepta overrides (tests).
# ==============================================================================

import os
from typing import Any, Dict

from dotenv import load_dotenv

from uniprice.models.entities import (
    DEFAULT_CITIES,
    DEFAULT_ITEM_PRICE,
    DEFAULT_BUNDLE_ITEM_COUNT,
)

# Cargar variables desde .env si existe
load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Hash de 'admin123' solo para desarrollo; en producción definir ADMIN_PASSWORD_HASH
_DEV_ADMIN_PASSWORD = 'admin123'

BUNDLE_DUPLICATE_POLICIES = ('allow', 'reject')
BUNDLE_OVERFLOW_POLICIES = ('keep', 'truncate')


def _split_csv(value: str, default):
    if not value:
        return list(default)
    items = [v.strip() for v in value.split(',') if v.strip()]
    return items or list(default)


class Config:
    """Configuration class for the application."""

    # Sesión
    SECRET_KEY = os.getenv("UNIPRICE_SECRET_KEY", "uniprice_dev_secret_key_change_in_production")

    # Directorio de snapshots locales y settings
    DATA_DIR = os.getenv("UNIPRICE_DATA_DIR") or os.path.join(BASE_DIR, "data")

    # Firestore (firebase-admin). Sin credenciales no hay modo remoto.
    FIREBASE_CREDENTIALS = os.getenv("FIREBASE_CREDENTIALS")

    # Gemini
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

    # Google Drive (subida de imágenes)
    DRIVE_FOLDER_ID = os.getenv("DRIVE_FOLDER_ID", "")

    # Administrador
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD_HASH = os.getenv("ADMIN_PASSWORD_HASH")

    # Bundle
    BUNDLE_DUPLICATE_POLICY = os.getenv("BUNDLE_DUPLICATE_POLICY", "allow").lower()
    BUNDLE_OVERFLOW_POLICY = os.getenv("BUNDLE_OVERFLOW_POLICY", "keep").lower()

    # Checkout
    CITIES = _split_csv(os.getenv("CITIES", ""), DEFAULT_CITIES)

    # Valores por defecto del documento de configuración
    DEFAULT_ITEM_PRICE = DEFAULT_ITEM_PRICE
    DEFAULT_BUNDLE_ITEM_COUNT = DEFAULT_BUNDLE_ITEM_COUNT

    # Límite de subida (imágenes / importación masiva)
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024  # 5 MB

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Retorna las opciones en mayúsculas como diccionario."""
        return {
            key: getattr(cls, key)
            for key in dir(cls)
            if key.isupper()
        }

    @classmethod
    def validate(cls, values: Dict[str, Any]) -> bool:
        """Valida las opciones que tienen un conjunto cerrado de valores."""
        errors = []
        if values.get('BUNDLE_DUPLICATE_POLICY') not in BUNDLE_DUPLICATE_POLICIES:
            errors.append("BUNDLE_DUPLICATE_POLICY")
        if values.get('BUNDLE_OVERFLOW_POLICY') not in BUNDLE_OVERFLOW_POLICIES:
            errors.append("BUNDLE_OVERFLOW_POLICY")
        if not values.get('CITIES'):
            errors.append("CITIES")

        if errors:
            raise ValueError(f"Invalid configuration: {', '.join(errors)}")

        return True


def dev_admin_password() -> str:
    """Contraseña de desarrollo usada cuando no hay ADMIN_PASSWORD_HASH."""
    return _DEV_ADMIN_PASSWORD
