# ==============================================================================
# SERVICIO DE CHECKOUT (pago contra entrega)
# ==============================================================================
# Flujo:
#   1. Validar campos requeridos no vacíos y ciudad dentro de la lista
#   2. Tomar snapshot del carrito y su total
#   3. Crear el pedido por la ruta de persistencia activa
#   4. Vaciar el carrito SOLO si la creación fue exitosa
# ==============================================================================

import time
from typing import Any, Dict, Optional, Sequence

from uniprice.errors import UnipriceError, ValidationError
from uniprice.models.entities import Customer, DEFAULT_CITIES
from uniprice.services.cart_service import CartService
from uniprice.services.mode_controller import ModeController
from uniprice.utils.logger import get_logger

logger = get_logger("pedido")

REQUIRED_FIELDS = ('name', 'phone', 'address', 'city')


class CheckoutService:
    """
    Servicio de checkout.

    Args:
        cart_service: Carrito de la sesión actual
        mode_controller: Provee la ruta de persistencia activa
        cities: Ciudades con entrega
    """

    def __init__(
        self,
        cart_service: CartService,
        mode_controller: ModeController,
        cities: Optional[Sequence[str]] = None
    ):
        self.cart_service = cart_service
        self.mode_controller = mode_controller
        self.cities = list(cities or DEFAULT_CITIES)

    @property
    def default_city(self) -> str:
        return self.cities[0]

    def validate_customer(self, data: Optional[Dict[str, Any]]) -> Customer:
        """
        Valida los datos de entrega.

        Raises:
            ValidationError: Campo vacío o ciudad fuera de la lista
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValidationError("Datos de entrega inválidos", field='customer')
        values = {}
        for field_name in REQUIRED_FIELDS:
            value = str(data.get(field_name) or '').strip()
            if not value:
                raise ValidationError(f"El campo '{field_name}' es requerido", field=field_name)
            values[field_name] = value

        if values['city'] not in self.cities:
            raise ValidationError(f"Ciudad no disponible: {values['city']}", field='city')

        return Customer(**values)

    def place_order(self, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Registra un pedido con el contenido actual del carrito.

        Returns:
            Dict con ok, order, mensaje (o error)
        """
        try:
            customer = self.validate_customer(data)
        except ValidationError as exc:
            return {'ok': False, 'error': str(exc), 'field': exc.field}

        items = self.cart_service.lines()
        if not items:
            return {'ok': False, 'error': 'El carrito está vacío'}

        total = sum(item.line_total for item in items)
        timestamp = int(time.time() * 1000)

        try:
            order = self.mode_controller.data_source.create_order(customer, items, total, timestamp)
        except UnipriceError as exc:
            logger.error(f"[PEDIDO] No se pudo registrar el pedido: {exc}")
            return {'ok': False, 'error': 'No se pudo registrar el pedido. Intenta de nuevo.'}

        self.cart_service.clear()
        logger.info(f"[PEDIDO] Pedido {order.id} registrado ({customer.city}, Rs. {total})")
        return {
            'ok': True,
            'order': order.to_dict(),
            'mensaje': f"Your goodies are on their way. Get Rs. {total} ready for Cash on Delivery!",
        }
