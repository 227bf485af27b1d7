# ==============================================================================
# SERVICIO DE CARRITO
# ==============================================================================
# Centraliza toda la lógica de negocio relacionada con el carrito de compras.
# El carrito se almacena en la sesión de Flask (efímero por comprador) y se
# vacía después de un pedido exitoso.
#
# Una línea por id de producto; el precio queda congelado al agregar.
#
# La sesión es una cookie firmada (límite ~4 KB): cada línea del catálogo
# guarda solo {id, name, price, quantity} y el resto de los campos se
# completa desde StoreState al leer. Las líneas sintetizadas (bundle
# completado) no existen en el catálogo y se guardan completas.
# ==============================================================================

from typing import Any, Dict, List, MutableMapping, Optional

from flask import session

from uniprice.models.entities import CartItem, Product
from uniprice.services.image_service import normalize_image_url
from uniprice.services.store_state import StoreState

CART_KEY = 'cart'


class CartService:
    """
    Servicio para gestión del carrito de compras.

    Responsabilidades:
    - Agregar líneas (o sumar cantidad si ya existen)
    - Incrementar / decrementar / fijar cantidad
    - Calcular total y cantidad de unidades
    - Limpiar carrito

    El carrito se almacena en session['cart'].

    Args:
        state: Catálogo en memoria para completar las líneas al leer
        storage: Mapping donde vive el carrito; por defecto la sesión de Flask
    """

    def __init__(self, state: Optional[StoreState] = None, storage: Optional[MutableMapping] = None):
        self.state = state
        self._storage = storage

    @property
    def storage(self) -> MutableMapping:
        return self._storage if self._storage is not None else session

    def _get_raw(self) -> List[Dict[str, Any]]:
        raw = self.storage.get(CART_KEY, [])
        return [dict(d) for d in raw if isinstance(d, dict)]

    def _save_raw(self, raw: List[Dict[str, Any]]) -> None:
        # Reasignar la clave para que Flask detecte el cambio
        self.storage[CART_KEY] = raw
        if self._storage is None:
            session.modified = True

    def _hydrate(self, data: Dict[str, Any]) -> CartItem:
        """Línea completa: campos del producto vigente + lo guardado en sesión."""
        product = self.state.find_product(str(data.get('id', ''))) if self.state else None
        if product is None:
            return CartItem.from_dict(data)
        base = product.to_dict()
        base['image'] = normalize_image_url(base['image'])
        return CartItem.from_dict({**base, **data})

    def _get_lines(self) -> List[CartItem]:
        return [self._hydrate(d) for d in self._get_raw()]

    # =========================================================================
    # LECTURA
    # =========================================================================

    def lines(self) -> List[CartItem]:
        return self._get_lines()

    def total(self) -> int:
        """Σ(precio × cantidad)."""
        return sum(line.line_total for line in self._get_lines())

    def count(self) -> int:
        """Σ(cantidad)."""
        return sum(line.quantity for line in self._get_lines())

    def get_cart(self) -> Dict[str, Any]:
        """
        Obtiene el carrito con totales calculados.

        Returns:
            Dict con items, total, count
        """
        lines = self._get_lines()
        return {
            'items': [line.to_dict() for line in lines],
            'total': sum(line.line_total for line in lines),
            'count': sum(line.quantity for line in lines),
        }

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    def add_to_cart(self, product: Optional[Product]) -> Dict[str, Any]:
        """
        Agrega un producto: +1 si la línea existe, línea nueva si no.

        Args:
            product: Producto con el precio ya proyectado
        """
        if product is None:
            return {'ok': False, 'error': 'Producto no encontrado'}

        raw = self._get_raw()
        for entry in raw:
            if entry.get('id') == product.id:
                entry['quantity'] = int(entry.get('quantity', 1)) + 1
                break
        else:
            raw.append({
                'id': product.id,
                'name': product.name,
                'price': product.price,
                'quantity': 1,
            })

        self._save_raw(raw)
        return {'ok': True, 'cart': self.get_cart()}

    def append_line(self, item: CartItem) -> Dict[str, Any]:
        """Agrega una línea ya construida (bundle completado)."""
        raw = self._get_raw()
        raw.append(item.to_dict())
        self._save_raw(raw)
        return {'ok': True, 'cart': self.get_cart()}

    def increment(self, product_id: str) -> Dict[str, Any]:
        raw = self._get_raw()
        for entry in raw:
            if entry.get('id') == product_id:
                entry['quantity'] = int(entry.get('quantity', 1)) + 1
                self._save_raw(raw)
                return {'ok': True, 'cart': self.get_cart()}
        return {'ok': False, 'error': 'El producto no está en el carrito'}

    def decrement(self, product_id: str) -> Dict[str, Any]:
        """Resta 1; en 0 la línea desaparece."""
        for entry in self._get_raw():
            if entry.get('id') == product_id:
                return self.set_quantity(product_id, int(entry.get('quantity', 1)) - 1)
        return {'ok': False, 'error': 'El producto no está en el carrito'}

    def set_quantity(self, product_id: str, quantity: Any) -> Dict[str, Any]:
        """
        Fija la cantidad de una línea. 0 (o menos) elimina la línea.
        """
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'Cantidad inválida'}

        raw = self._get_raw()
        if not any(entry.get('id') == product_id for entry in raw):
            return {'ok': False, 'error': 'El producto no está en el carrito'}

        if quantity <= 0:
            raw = [entry for entry in raw if entry.get('id') != product_id]
        else:
            for entry in raw:
                if entry.get('id') == product_id:
                    entry['quantity'] = quantity

        self._save_raw(raw)
        return {'ok': True, 'cart': self.get_cart()}

    def clear(self) -> Dict[str, Any]:
        self._save_raw([])
        return {'ok': True, 'cart': self.get_cart()}
