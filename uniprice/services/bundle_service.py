# ==============================================================================
# SERVICIO DE BUNDLE ("Super Saver Bundle")
# ==============================================================================
# Colección ordenada de capacidad fija:
#   capacidad = StoreConfig.bundle_item_count
#   precio    = floor(item_price × bundle_item_count × 0.9)
#
# Capacidad y precio se recalculan en cada lectura a partir de la config
# actual; los ids de los slots elegidos viven en la sesión de Flask y se
# completan desde el catálogo en cada lectura.
#
# Políticas configurables:
#   duplicate_policy = 'allow'  → el mismo producto puede ocupar varios slots
#                      'reject' → agregar un producto ya presente no hace nada
#   overflow_policy  = 'keep'     → si baja la capacidad, los slots se conservan
#                      'truncate' → se descartan los slots sobrantes del final
# ==============================================================================

import uuid
from typing import Any, Dict, Iterable, List, MutableMapping, Optional

from flask import session

from uniprice.models.entities import Bundle, BUNDLE_NAME, CartItem, Category, Product
from uniprice.services.cart_service import CartService
from uniprice.services.catalog_service import display_product
from uniprice.services.store_state import StoreState
from uniprice.utils.logger import get_logger

logger = get_logger("bundle")

BUNDLE_KEY = 'bundle_slots'
BUNDLE_LINE_CATEGORY = Category.GADGETS
BUNDLE_LINE_DESCRIPTION = 'Group Deal'


class BundleService:
    """
    Servicio del bundle de precio fijo.

    Args:
        state: Estado en memoria (config para capacidad/precio, catálogo)
        cart_service: Carrito donde se agrega el bundle completado
        duplicate_policy: 'allow' | 'reject'
        overflow_policy: 'keep' | 'truncate'
        storage: Mapping donde viven los slots; por defecto la sesión de Flask
    """

    def __init__(
        self,
        state: StoreState,
        cart_service: CartService,
        duplicate_policy: str = 'allow',
        overflow_policy: str = 'keep',
        storage: Optional[MutableMapping] = None
    ):
        self.state = state
        self.cart_service = cart_service
        self.duplicate_policy = duplicate_policy
        self.overflow_policy = overflow_policy
        self._storage = storage

    @property
    def storage(self) -> MutableMapping:
        return self._storage if self._storage is not None else session

    def _get_slots(self) -> List[Product]:
        """Slots completados desde el catálogo; ids que ya no existen se descartan."""
        config = self.state.config
        slots = []
        for product_id in self.storage.get(BUNDLE_KEY, []):
            product = self.state.find_product(str(product_id))
            if product is not None:
                slots.append(display_product(product, config))
        return slots

    def _save_slots(self, slots: List[Product]) -> None:
        # Solo ids: la sesión es una cookie con límite de tamaño
        self.storage[BUNDLE_KEY] = [p.id for p in slots]
        if self._storage is None:
            session.modified = True

    # =========================================================================
    # LECTURA
    # =========================================================================

    def get_bundle(self) -> Bundle:
        """Bundle con capacidad y precio de la config actual."""
        config = self.state.config
        slots = self._get_slots()
        if self.overflow_policy == 'truncate' and len(slots) > config.bundle_item_count:
            slots = slots[:config.bundle_item_count]
            self._save_slots(slots)
        return Bundle(
            max_items=config.bundle_item_count,
            bundle_price=config.bundle_price,
            items=slots,
        )

    def _result(self, **extra) -> Dict[str, Any]:
        return {'ok': True, 'bundle': self.get_bundle().to_dict(), **extra}

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    def add(self, product: Optional[Product]) -> Dict[str, Any]:
        """
        Ocupa el siguiente slot.

        Lleno, o duplicado con política 'reject': no-op silencioso
        (ok=True, added=False).
        """
        if product is None:
            return {'ok': False, 'error': 'Producto no encontrado'}

        bundle = self.get_bundle()
        if len(bundle.items) >= bundle.max_items:
            return self._result(added=False)
        if self.duplicate_policy == 'reject' and bundle.contains(product.id):
            return self._result(added=False)

        self._save_slots(bundle.items + [product])
        return self._result(added=True)

    def remove_at(self, index: Any) -> Dict[str, Any]:
        """Quita un slot específico (soporta duplicados)."""
        try:
            index = int(index)
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'Índice inválido'}

        slots = self.get_bundle().items
        if index < 0 or index >= len(slots):
            return {'ok': False, 'error': 'Índice fuera de rango'}

        del slots[index]
        self._save_slots(slots)
        return self._result()

    def remove_by_id(self, product_id: str) -> Dict[str, Any]:
        """Quita la primera coincidencia por id."""
        slots = self.get_bundle().items
        for i, item in enumerate(slots):
            if item.id == product_id:
                del slots[i]
                self._save_slots(slots)
                return self._result()
        return {'ok': False, 'error': 'El producto no está en el bundle'}

    def clear(self) -> Dict[str, Any]:
        self._save_slots([])
        return self._result()

    def complete(self) -> Dict[str, Any]:
        """
        Convierte el bundle lleno en una sola línea del carrito.

        Solo válido con len(items) == max_items; en otro caso no cambia
        ni el carrito ni el bundle (completed=False).
        """
        bundle = self.get_bundle()
        if bundle.is_empty or not bundle.is_full:
            return self._result(completed=False, cart=self.cart_service.get_cart())

        line = build_bundle_line(bundle)
        self.cart_service.append_line(line)
        self._save_slots([])
        logger.info(f"[BUNDLE] Bundle completado: {line.id} ({len(bundle.items)} productos)")
        return self._result(completed=True, item=line.to_dict(), cart=self.cart_service.get_cart())

    def apply_suggestion(self, product_ids: Iterable[str]) -> Dict[str, Any]:
        """
        Reemplaza los slots por los productos sugeridos.

        Se respeta el orden del catálogo y se trunca a la capacidad.
        """
        wanted = {str(pid) for pid in product_ids}
        capacity = self.state.config.bundle_item_count
        item_price = self.state.config.item_price
        chosen = [
            p.with_price(item_price)
            for p in self.state.products
            if p.id in wanted
        ][:capacity]
        self._save_slots(chosen)
        return self._result(applied=len(chosen))


def build_bundle_line(bundle: Bundle) -> CartItem:
    """Línea de carrito sintetizada a partir de un bundle lleno."""
    names = ', '.join(item.name for item in bundle.items)
    return CartItem(
        id=f"bundle-{uuid.uuid4().hex[:12]}",
        name=f"{BUNDLE_NAME} ({names})",
        price=bundle.bundle_price,
        category=BUNDLE_LINE_CATEGORY,
        image=bundle.items[0].image if bundle.items else '',
        description=BUNDLE_LINE_DESCRIPTION,
        quantity=1,
    )
