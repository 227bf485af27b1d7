# ==============================================================================
# REPOSITORIO DE CONFIGURACIONES LOCALES
# ==============================================================================
# Encapsula todo el acceso a settings.json: estado durable que NUNCA se
# sincroniza con Firestore.
#   - Flag de modo (remote/local), persistido hasta un reset explícito
#   - Token de Google Drive y su expiración
#   - Tokens de notificaciones push
#   - Favoritos por cliente (id de cliente guardado en la sesión)
# ==============================================================================

import os
import time
from typing import Any, Dict, List, Optional

from .base import DictRepository


# Sección reservada para preferencias de la instalación
APP_SECTION = '_app'


class SettingsRepository(DictRepository):
    """
    Repositorio para preferencias locales.

    Formato de datos en settings.json:
    {
        "_app": {"mode": "local", "drive_token": "...", "drive_token_expiry": 1700000000000},
        "3f2a...": {"favorites": ["1", "7"]}
    }
    """

    def __init__(self, base_path: str):
        """
        Inicializa el repositorio de settings.

        Args:
            base_path: Directorio de datos
        """
        file_path = os.path.join(base_path, 'settings.json')
        super().__init__(file_path)

    def load(self) -> Dict[str, Dict[str, Any]]:
        return self.get_all()

    def save(self, settings: Dict[str, Dict[str, Any]]) -> None:
        self.save_all(settings)

    def get_setting(self, section: str, key: str, default: Any = None) -> Any:
        """
        Obtiene una configuración específica.

        Args:
            section: Sección (APP_SECTION o id de cliente)
            key: Clave de la configuración
            default: Valor por defecto si no existe
        """
        section_data = self.load().get(section) or {}
        return section_data.get(key, default)

    def set_setting(self, section: str, key: str, value: Any) -> None:
        # Leer-modificar-escribir bajo el mismo lock que la escritura atómica
        with self._file_lock:
            settings = self.load()
            if not isinstance(settings.get(section), dict):
                settings[section] = {}
            settings[section][key] = value
            self.save(settings)

    def delete_setting(self, section: str, key: str) -> bool:
        with self._file_lock:
            settings = self.load()
            section_data = settings.get(section)
            if not isinstance(section_data, dict) or key not in section_data:
                return False
            del section_data[key]
            self.save(settings)
            return True

    # =========================================================================
    # Modo de persistencia
    # =========================================================================

    def get_mode(self) -> Optional[str]:
        """Retorna 'local', 'remote' o None si nunca se fijó."""
        return self.get_setting(APP_SECTION, 'mode')

    def set_mode(self, mode: str) -> None:
        self.set_setting(APP_SECTION, 'mode', mode)

    def clear_mode(self) -> None:
        self.delete_setting(APP_SECTION, 'mode')

    # =========================================================================
    # Favoritos (por cliente)
    # =========================================================================

    def get_favorites(self, client_id: str) -> List[str]:
        favorites = self.get_setting(client_id, 'favorites', [])
        if not isinstance(favorites, list):
            return []
        return [str(f) for f in favorites]

    def set_favorites(self, client_id: str, favorites: List[str]) -> None:
        self.set_setting(client_id, 'favorites', list(favorites))

    # =========================================================================
    # Token de Google Drive
    # =========================================================================

    def set_drive_token(self, token: str, expires_in: int) -> int:
        """
        Guarda el token de acceso y su expiración.

        Args:
            token: Token OAuth obtenido por el cliente
            expires_in: Segundos de validez

        Returns:
            Expiración en epoch ms
        """
        expiry = int(time.time() * 1000) + int(expires_in) * 1000
        with self._file_lock:
            settings = self.load()
            app_section = settings.setdefault(APP_SECTION, {})
            app_section['drive_token'] = token
            app_section['drive_token_expiry'] = expiry
            self.save(settings)
        return expiry

    def get_valid_drive_token(self, now_ms: Optional[int] = None) -> Optional[str]:
        """Retorna el token solo si existe y no expiró."""
        token = self.get_setting(APP_SECTION, 'drive_token')
        expiry = self.get_setting(APP_SECTION, 'drive_token_expiry', 0)
        if not token:
            return None
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        try:
            if int(expiry) <= now_ms:
                return None
        except (TypeError, ValueError):
            return None
        return token

    def clear_drive_token(self) -> None:
        with self._file_lock:
            settings = self.load()
            app_section = settings.get(APP_SECTION) or {}
            app_section.pop('drive_token', None)
            app_section.pop('drive_token_expiry', None)
            settings[APP_SECTION] = app_section
            self.save(settings)

    # =========================================================================
    # Tokens push
    # =========================================================================

    def add_push_token(self, token: str) -> bool:
        """Registra un token de entrega; False si ya existía."""
        with self._file_lock:
            tokens = self.get_setting(APP_SECTION, 'push_tokens', [])
            if token in tokens:
                return False
            tokens.append(token)
            self.set_setting(APP_SECTION, 'push_tokens', tokens)
            return True

    def get_push_tokens(self) -> List[str]:
        return list(self.get_setting(APP_SECTION, 'push_tokens', []))
