# ==============================================================================
# GATEWAY REMOTO - Firestore (firebase-admin)
# ==============================================================================
# Tres suscripciones en vivo e independientes:
#   products           → colección completa
#   orders             → colección ordenada por timestamp descendente
#   settings/store     → documento único de configuración
#
# Cada evento remoto reemplaza la colección en memoria completa
# (last-writer-wins por snapshot). Los documentos crudos se convierten
# en entidades tipadas AQUÍ; nada sin tipar sale de este módulo.
#
# Las escrituras se esperan solo para reportar error al llamador:
# sin reintentos, sin cola. Una escritura fallida NO cambia el modo.
# ==============================================================================

from typing import Any, Callable, List, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from uniprice.errors import SyncError, WriteError
from uniprice.models.entities import Order, Product, StoreConfig
from uniprice.utils.logger import get_logger

logger = get_logger("sync")

PRODUCTS_COLLECTION = 'products'
ORDERS_COLLECTION = 'orders'
SETTINGS_COLLECTION = 'settings'
CONFIG_DOCUMENT = 'store'


def create_firestore_client(credentials_path: str):
    """
    Inicializa firebase-admin (una sola vez por proceso) y retorna
    el cliente de Firestore.

    Args:
        credentials_path: Ruta al JSON de la cuenta de servicio
    """
    try:
        firebase_admin.get_app()
    except ValueError:
        firebase_admin.initialize_app(credentials.Certificate(credentials_path))
    return firestore.client()


class Subscription:
    """
    Suscripción en vivo a una colección o documento.
    Cancelar = unsubscribe(); es idempotente.
    """

    def __init__(self, name: str, watch: Any):
        self.name = name
        self._watch = watch

    @property
    def active(self) -> bool:
        return self._watch is not None

    def unsubscribe(self) -> None:
        if self._watch is None:
            return
        watch, self._watch = self._watch, None
        try:
            watch.unsubscribe()
        except Exception as exc:
            logger.warning(f"[SYNC] Error cancelando suscripción '{self.name}': {exc}")


class RemoteSyncGateway:
    """
    Productor único por colección remota.

    Args:
        client: Cliente de Firestore (google.cloud.firestore.Client o
                cualquier objeto con la misma interfaz)
    """

    def __init__(self, client: Any):
        self.client = client

    # =========================================================================
    # SUSCRIPCIONES
    # =========================================================================

    def subscribe_products(
        self,
        on_snapshot: Callable[[List[Product]], None],
        on_error: Callable[[Exception], None]
    ) -> Subscription:
        ref = self.client.collection(PRODUCTS_COLLECTION)

        def mapper(docs) -> List[Product]:
            return [Product.from_dict(d.to_dict() or {}, doc_id=d.id) for d in docs]

        return self._subscribe(PRODUCTS_COLLECTION, ref, mapper, on_snapshot, on_error)

    def subscribe_orders(
        self,
        on_snapshot: Callable[[List[Order]], None],
        on_error: Callable[[Exception], None]
    ) -> Subscription:
        ref = self.client.collection(ORDERS_COLLECTION).order_by(
            'timestamp', direction=firestore.Query.DESCENDING
        )

        def mapper(docs) -> List[Order]:
            return [Order.from_dict(d.to_dict() or {}, doc_id=d.id) for d in docs]

        return self._subscribe(ORDERS_COLLECTION, ref, mapper, on_snapshot, on_error)

    def subscribe_config(
        self,
        on_snapshot: Callable[[Optional[StoreConfig]], None],
        on_error: Callable[[Exception], None]
    ) -> Subscription:
        """El callback recibe None cuando el documento no existe."""
        ref = self._config_ref()

        def mapper(docs) -> Optional[StoreConfig]:
            for d in docs:
                if getattr(d, 'exists', False):
                    return StoreConfig.from_dict(d.to_dict())
            return None

        return self._subscribe(f"{SETTINGS_COLLECTION}/{CONFIG_DOCUMENT}", ref, mapper, on_snapshot, on_error)

    def _subscribe(
        self,
        name: str,
        ref: Any,
        mapper: Callable[[Any], Any],
        on_snapshot: Callable[[Any], None],
        on_error: Callable[[Exception], None]
    ) -> Subscription:
        """
        Abre una suscripción.

        Hace una lectura bloqueante primero para que errores de permisos,
        red o cuota aparezcan al abrir (on_snapshot no los reporta).

        Raises:
            SyncError: Si la lectura inicial o el registro del watcher fallan
        """
        try:
            ref.get()
        except Exception as exc:
            raise SyncError(f"No se pudo abrir '{name}': {exc}") from exc

        def callback(docs, changes=None, read_time=None):
            try:
                on_snapshot(mapper(docs))
            except Exception as exc:
                on_error(SyncError(f"Error procesando snapshot de '{name}': {exc}"))

        try:
            watch = ref.on_snapshot(callback)
        except Exception as exc:
            raise SyncError(f"No se pudo suscribir a '{name}': {exc}") from exc

        logger.info(f"[SYNC] Suscripción activa: {name}")
        return Subscription(name, watch)

    # =========================================================================
    # ESCRITURAS
    # =========================================================================

    def add_product(self, product: Product) -> str:
        """Crea un producto; retorna el id asignado por Firestore."""
        try:
            _, ref = self.client.collection(PRODUCTS_COLLECTION).add(product.to_dict(include_id=False))
            return ref.id
        except Exception as exc:
            raise WriteError(f"No se pudo crear el producto: {exc}") from exc

    def update_product(self, product: Product) -> None:
        try:
            self.client.collection(PRODUCTS_COLLECTION).document(product.id).update(
                product.to_dict(include_id=False)
            )
        except Exception as exc:
            raise WriteError(f"No se pudo actualizar el producto {product.id}: {exc}") from exc

    def delete_product(self, product_id: str) -> None:
        try:
            self.client.collection(PRODUCTS_COLLECTION).document(product_id).delete()
        except Exception as exc:
            raise WriteError(f"No se pudo eliminar el producto {product_id}: {exc}") from exc

    def set_config(self, config: StoreConfig) -> None:
        """Upsert del documento de configuración."""
        try:
            self._config_ref().set(config.to_dict())
        except Exception as exc:
            raise WriteError(f"No se pudo guardar la configuración: {exc}") from exc

    def create_order(self, order: Order) -> str:
        try:
            _, ref = self.client.collection(ORDERS_COLLECTION).add(order.to_dict(include_id=False))
            return ref.id
        except Exception as exc:
            raise WriteError(f"No se pudo registrar el pedido: {exc}") from exc

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def _config_ref(self):
        return self.client.collection(SETTINGS_COLLECTION).document(CONFIG_DOCUMENT)
