# ==============================================================================
# ESTADO EN MEMORIA DE LA TIENDA
# ==============================================================================
# Dueño único de las colecciones compartidas del proceso:
#   products, orders, config
# Solo se mutan a través de estos métodos. Las lecturas retornan copias
# para que ninguna vista observe un estado a medio actualizar.
# ==============================================================================

import threading
from typing import List, Optional

from uniprice.models.entities import Order, Product, StoreConfig


class StoreState:
    """Colecciones en memoria alimentadas por Firestore o por el snapshot local."""

    def __init__(self, config: Optional[StoreConfig] = None):
        self._lock = threading.RLock()
        self._products: List[Product] = []
        self._orders: List[Order] = []
        self._config = config or StoreConfig()
        self._loaded = False

    # =========================================================================
    # LECTURAS
    # =========================================================================

    @property
    def products(self) -> List[Product]:
        with self._lock:
            return list(self._products)

    @property
    def orders(self) -> List[Order]:
        with self._lock:
            return list(self._orders)

    @property
    def config(self) -> StoreConfig:
        with self._lock:
            return self._config

    @property
    def loaded(self) -> bool:
        """True cuando llegó el primer snapshot de productos."""
        return self._loaded

    def find_product(self, product_id: str) -> Optional[Product]:
        with self._lock:
            for product in self._products:
                if product.id == product_id:
                    return product
        return None

    # =========================================================================
    # REEMPLAZO COMPLETO (snapshots)
    # =========================================================================

    def replace_products(self, products: List[Product]) -> None:
        with self._lock:
            self._products = list(products)
            self._loaded = True

    def replace_orders(self, orders: List[Order]) -> None:
        with self._lock:
            self._orders = list(orders)

    def replace_config(self, config: StoreConfig) -> None:
        with self._lock:
            self._config = config

    # =========================================================================
    # MUTACIONES PUNTUALES (modo local)
    # =========================================================================

    def prepend_product(self, product: Product) -> List[Product]:
        with self._lock:
            self._products = [product] + self._products
            return list(self._products)

    def update_product(self, product: Product) -> bool:
        with self._lock:
            for i, current in enumerate(self._products):
                if current.id == product.id:
                    self._products = self._products[:i] + [product] + self._products[i + 1:]
                    return True
        return False

    def remove_product(self, product_id: str) -> bool:
        with self._lock:
            remaining = [p for p in self._products if p.id != product_id]
            removed = len(remaining) != len(self._products)
            self._products = remaining
            return removed

    def prepend_order(self, order: Order) -> List[Order]:
        with self._lock:
            self._orders = [order] + self._orders
            return list(self._orders)

    def clear_orders(self) -> None:
        with self._lock:
            self._orders = []
