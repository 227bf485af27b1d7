# ==============================================================================
# RUTAS DE PERSISTENCIA (remota / local)
# ==============================================================================
# Ambas implementan IDataSource. El Mode Controller decide cuál está activa;
# exactamente una lo está en cada momento.
#
# RemoteDataSource: escribe en Firestore y deja que las suscripciones
#                   actualicen la memoria (sin eco local).
# LocalDataSource:  muta la memoria y reescribe el snapshot completo
#                   de la colección afectada.
# ==============================================================================

import threading
import time
import uuid
from dataclasses import replace
from typing import List

from uniprice.models.entities import CartItem, Customer, Order, Product, StoreConfig
from uniprice.repositories.remote_gateway import RemoteSyncGateway
from uniprice.repositories.snapshot_repository import LocalSnapshotStore
from uniprice.services.store_state import StoreState
from uniprice.utils.logger import get_logger

logger = get_logger("local")


def _now_ms() -> int:
    return int(time.time() * 1000)


class RemoteDataSource:
    """Escrituras contra Firestore."""

    def __init__(self, state: StoreState, gateway: RemoteSyncGateway):
        self.state = state
        self.gateway = gateway

    def add_product(self, product: Product) -> Product:
        new_id = self.gateway.add_product(product)
        return replace(product, id=new_id)

    def update_product(self, product: Product) -> bool:
        self.gateway.update_product(product)
        return True

    def delete_product(self, product_id: str) -> bool:
        self.gateway.delete_product(product_id)
        return True

    def update_config(self, config: StoreConfig) -> None:
        self.gateway.set_config(config)

    def create_order(
        self,
        customer: Customer,
        items: List[CartItem],
        total: int,
        timestamp: int
    ) -> Order:
        draft = Order(id='', customer=customer, items=tuple(items), total=total, timestamp=timestamp)
        new_id = self.gateway.create_order(draft)
        return replace(draft, id=new_id)

    def clear_orders(self) -> None:
        # Solo la vista: la colección remota no se toca
        self.state.clear_orders()


class LocalDataSource:
    """Escrituras en memoria + snapshot JSON completo."""

    # Mutación y guardado del snapshot forman una sola sección crítica:
    # el archivo siempre refleja la última versión de la memoria
    _write_lock = threading.RLock()

    def __init__(self, state: StoreState, snapshot_store: LocalSnapshotStore):
        self.state = state
        self.snapshot_store = snapshot_store

    def add_product(self, product: Product) -> Product:
        created = replace(product, id=uuid.uuid4().hex[:12])
        with self._write_lock:
            products = self.state.prepend_product(created)
            self.snapshot_store.save_products(products)
        logger.info(f"[LOCAL] Producto creado: {created.id}")
        return created

    def update_product(self, product: Product) -> bool:
        with self._write_lock:
            if not self.state.update_product(product):
                return False
            self.snapshot_store.save_products(self.state.products)
        return True

    def delete_product(self, product_id: str) -> bool:
        with self._write_lock:
            if not self.state.remove_product(product_id):
                return False
            self.snapshot_store.save_products(self.state.products)
        return True

    def update_config(self, config: StoreConfig) -> None:
        with self._write_lock:
            self.state.replace_config(config)
            self.snapshot_store.save_config(config)

    def create_order(
        self,
        customer: Customer,
        items: List[CartItem],
        total: int,
        timestamp: int
    ) -> Order:
        order = Order(
            id=f"LOCAL-{_now_ms()}-{uuid.uuid4().hex[:4].upper()}",
            customer=customer,
            items=tuple(items),
            total=total,
            timestamp=timestamp,
        )
        with self._write_lock:
            orders = self.state.prepend_order(order)
            self.snapshot_store.save_orders(orders)
        logger.info(f"[LOCAL] Pedido registrado: {order.id}")
        return order

    def clear_orders(self) -> None:
        with self._write_lock:
            self.state.clear_orders()
            self.snapshot_store.clear_orders()
