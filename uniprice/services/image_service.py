# ==============================================================================
# SERVICIO DE IMÁGENES
# ==============================================================================
# Tres caminos igual de válidos para la imagen de un producto:
#   a) URL pegada a mano (se normalizan los links viejos de Drive)
#   b) Subida a Google Drive con un token OAuth vigente
#   c) Análisis con Gemini: sugiere nombre/descripción/categoría
#
# El token de Drive lo obtiene el navegador (flujo OAuth del cliente);
# aquí solo se guarda con su expiración y se verifica antes de subir.
# ==============================================================================

import json
import re
from typing import Any, Dict, Optional

import requests

from uniprice.errors import UploadError
from uniprice.repositories.settings_repository import APP_SECTION, SettingsRepository
from uniprice.services.ai_service import GeminiService
from uniprice.utils.logger import get_logger

logger = get_logger("drive")

DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files?uploadType=multipart&fields=id"
DRIVE_PERMISSIONS_URL = "https://www.googleapis.com/drive/v3/files/{file_id}/permissions"
PUBLIC_IMAGE_URL = "https://lh3.googleusercontent.com/d/{file_id}"

ALLOWED_IMAGE_TYPES = frozenset(['image/jpeg', 'image/png', 'image/webp', 'image/gif'])

_LEGACY_DRIVE_LINKS = (
    re.compile(r'drive\.google\.com/uc\?(?:[^#]*&)?id=([^&?#/]+)'),
    re.compile(r'drive\.google\.com/file/d/([^/?&#]+)'),
    re.compile(r'drive\.google\.com/open\?(?:[^#]*&)?id=([^&?#/]+)'),
)


def normalize_image_url(url: str) -> str:
    """
    Convierte links viejos de Drive en la URL embebible de
    lh3.googleusercontent.com. Formatos reconocidos:
        drive.google.com/uc?export=view&id=X
        drive.google.com/file/d/X/view
        drive.google.com/open?id=X
    Cualquier otra URL queda igual.
    """
    if not url:
        return url
    for pattern in _LEGACY_DRIVE_LINKS:
        match = pattern.search(url)
        if match:
            return PUBLIC_IMAGE_URL.format(file_id=match.group(1))
    return url


class ImageService:
    """
    Adquisición de imágenes para el panel admin.

    Args:
        settings_repo: Guarda el token de Drive y su expiración
        ai_service: Cliente de Gemini para el análisis visual
        folder_id: Carpeta de Drive destino
        http: Sesión de requests (inyectable en tests)
        timeout: Segundos por request
    """

    def __init__(
        self,
        settings_repo: SettingsRepository,
        ai_service: GeminiService,
        folder_id: str = '',
        http: Optional[requests.Session] = None,
        timeout: int = 60
    ):
        self.settings_repo = settings_repo
        self.ai_service = ai_service
        self.folder_id = folder_id
        self.http = http or requests.Session()
        self.timeout = timeout

    # =========================================================================
    # CONEXIÓN CON DRIVE
    # =========================================================================

    def connect_drive(self, token: Any, expires_in: Any) -> Dict[str, Any]:
        token = str(token or '').strip()
        if not token:
            return {'ok': False, 'error': 'Token de acceso requerido'}
        try:
            expires_in = int(expires_in)
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'expires_in inválido'}
        if expires_in <= 0:
            return {'ok': False, 'error': 'expires_in inválido'}

        expiry = self.settings_repo.set_drive_token(token, expires_in)
        logger.info("[DRIVE] Cuenta conectada")
        return {'ok': True, 'connected': True, 'expiresAt': expiry}

    def disconnect_drive(self) -> Dict[str, Any]:
        self.settings_repo.clear_drive_token()
        logger.info("[DRIVE] Cuenta desconectada")
        return {'ok': True, 'connected': False}

    def drive_status(self) -> Dict[str, Any]:
        return {
            'connected': self.settings_repo.get_valid_drive_token() is not None,
            'expiresAt': self.settings_repo.get_setting(APP_SECTION, 'drive_token_expiry'),
        }

    # =========================================================================
    # IMÁGENES
    # =========================================================================

    def set_url(self, url: Any) -> Dict[str, Any]:
        """Camino (a): URL manual."""
        url = str(url or '').strip()
        if not url:
            return {'ok': False, 'error': 'URL requerida'}
        if not re.match(r'^(https?:|data:image/)', url):
            return {'ok': False, 'error': 'URL inválida'}
        return {'ok': True, 'url': normalize_image_url(url)}

    def upload(self, content: bytes, filename: str, mime_type: str) -> Dict[str, Any]:
        """
        Camino (b): sube a Drive y retorna la URL pública.

        Returns:
            Dict con ok, url (o error)
        """
        if not content:
            return {'ok': False, 'error': 'Archivo vacío'}
        if mime_type not in ALLOWED_IMAGE_TYPES:
            return {'ok': False, 'error': f'Tipo de archivo no permitido: {mime_type}'}

        token = self.settings_repo.get_valid_drive_token()
        if token is None:
            return {'ok': False, 'error': 'Conecta Google Drive antes de subir imágenes', 'auth_required': True}

        try:
            url = self._upload_to_drive(content, filename, mime_type, token)
        except UploadError as exc:
            logger.error(f"[DRIVE] {exc}")
            return {'ok': False, 'error': 'Upload failed'}

        logger.info(f"[DRIVE] Imagen subida: {url}")
        return {'ok': True, 'url': url}

    def analyze(self, content: bytes, mime_type: str) -> Dict[str, Any]:
        """Camino (c): sugerencia de Gemini para el formulario."""
        if not content:
            return {'ok': False, 'error': 'Archivo vacío'}
        if mime_type not in ALLOWED_IMAGE_TYPES:
            return {'ok': False, 'error': f'Tipo de archivo no permitido: {mime_type}'}

        suggestion = self.ai_service.analyze_image(content, mime_type)
        if suggestion is None:
            return {'ok': False, 'error': 'No se pudo analizar la imagen'}
        return {'ok': True, 'suggestion': suggestion}

    def _upload_to_drive(self, content: bytes, filename: str, mime_type: str, token: str) -> str:
        """
        Subida multipart + permiso público de lectura.

        Raises:
            UploadError: Si la subida falla
        """
        metadata = {'name': filename or 'upload', 'mimeType': mime_type}
        if self.folder_id:
            metadata['parents'] = [self.folder_id]

        headers = {'Authorization': f'Bearer {token}'}
        files = {
            'metadata': (None, json.dumps(metadata), 'application/json'),
            'file': (filename or 'upload', content, mime_type),
        }
        try:
            resp = self.http.post(DRIVE_UPLOAD_URL, headers=headers, files=files, timeout=self.timeout)
            resp.raise_for_status()
            file_id = resp.json()['id']
        except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
            raise UploadError(f"Falló la subida a Drive: {exc}") from exc

        try:
            resp = self.http.post(
                DRIVE_PERMISSIONS_URL.format(file_id=file_id),
                headers=headers,
                json={'role': 'reader', 'type': 'anyone'},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            # La subida se conserva aunque no quede pública
            logger.warning(f"[DRIVE] No se pudo hacer pública la imagen {file_id}: {exc}")

        return PUBLIC_IMAGE_URL.format(file_id=file_id)
