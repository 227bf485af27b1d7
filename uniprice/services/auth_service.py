# ==============================================================================
# SERVICIO DE AUTENTICACIÓN (admin)
# ==============================================================================
# Una sola cuenta de administrador definida por configuración.
# La contraseña se verifica contra un hash de werkzeug.
# ==============================================================================

from typing import Any, Dict, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from uniprice.utils.logger import get_logger

logger = get_logger("auth")


class AuthService:
    """
    Args:
        username: Usuario administrador
        password_hash: Hash werkzeug de la contraseña
        dev_password: Contraseña en claro usada solo si no hay hash
    """

    def __init__(self, username: str, password_hash: Optional[str] = None, dev_password: Optional[str] = None):
        self.username = username
        if not password_hash:
            logger.warning("[AUTH] ADMIN_PASSWORD_HASH no definido; usando contraseña de desarrollo")
            password_hash = generate_password_hash(dev_password or '')
        self._password_hash = password_hash

    def authenticate(self, username: Any, password: Any) -> Dict[str, Any]:
        username = str(username or '').strip()
        password = str(password or '')
        if not username or not password:
            return {'ok': False, 'error': 'Usuario y contraseña requeridos'}

        if username != self.username or not check_password_hash(self._password_hash, password):
            logger.warning(f"[AUTH] Login fallido para '{username}'")
            return {'ok': False, 'error': 'Credenciales inválidas'}

        logger.info(f"[AUTH] Login admin: {username}")
        return {'ok': True, 'username': username}
