# ==============================================================================
# NOTIFICACIONES PUSH
# ==============================================================================
# El núcleo solo registra tokens de entrega y arma el texto del aviso en
# primer plano. La entrega en segundo plano es ajena a la aplicación.
# ==============================================================================

from typing import Any, Dict, Optional

from uniprice.repositories.settings_repository import SettingsRepository
from uniprice.utils.logger import get_logger

logger = get_logger("push")


def foreground_alert(payload: Optional[Dict[str, Any]]) -> str:
    """Texto del aviso: 'New Message: <title> - <body>'."""
    notification = (payload or {}).get('notification') or {}
    title = notification.get('title')
    body = notification.get('body')
    return f"New Message: {title} - {body}"


class NotificationService:
    def __init__(self, settings_repo: SettingsRepository):
        self.settings_repo = settings_repo

    def register_token(self, token: Any) -> Dict[str, Any]:
        token = str(token or '').strip()
        if not token:
            return {'ok': False, 'error': 'Token requerido'}
        created = self.settings_repo.add_push_token(token)
        if created:
            logger.info("[PUSH] Token de entrega registrado")
        return {'ok': True, 'registered': created}

    def handle_foreground(self, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        alert = foreground_alert(payload)
        logger.info(f"[PUSH] {alert}")
        return {'ok': True, 'alert': alert}
