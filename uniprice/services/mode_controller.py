# ==============================================================================
# MODE CONTROLLER - REMOTE ⇄ LOCAL
# ==============================================================================
# Máquina de dos estados:
#
#   REMOTE ──(cualquier error de suscripción)──► LOCAL
#   LOCAL  ──(reset explícito + reinicio)──────► REMOTE
#
# La decisión LOCAL se persiste en settings.json y se respeta en cada
# arranque hasta que el usuario pide "Retry Cloud Sync" (reset()).
# Dentro de una sesión no hay reconexión automática.
# ==============================================================================

import threading
from typing import Callable, List, Optional

from uniprice.errors import SyncError, WriteError
from uniprice.models.entities import Order, Product, StoreConfig, SyncMode
from uniprice.models.seed import seed_products
from uniprice.repositories.interfaces import IDataSource, ISettingsRepository
from uniprice.repositories.remote_gateway import RemoteSyncGateway, Subscription
from uniprice.repositories.snapshot_repository import LocalSnapshotStore
from uniprice.services.data_sources import LocalDataSource, RemoteDataSource
from uniprice.services.store_state import StoreState
from uniprice.utils.logger import get_logger

logger = get_logger("sync")

GatewayFactory = Callable[[], RemoteSyncGateway]


class ModeController:
    """
    Decide cuál ruta de persistencia está activa y alimenta StoreState.

    Args:
        state: Estado en memoria compartido
        settings_repo: Preferencias durables (flag de modo)
        snapshot_store: Snapshots locales
        gateway_factory: Crea el gateway remoto; None = sin modo remoto
        default_config: Configuración a sembrar si falta el documento remoto
    """

    def __init__(
        self,
        state: StoreState,
        settings_repo: ISettingsRepository,
        snapshot_store: LocalSnapshotStore,
        gateway_factory: Optional[GatewayFactory] = None,
        default_config: Optional[StoreConfig] = None
    ):
        self.state = state
        self.settings_repo = settings_repo
        self.snapshot_store = snapshot_store
        self.gateway_factory = gateway_factory
        self.default_config = default_config or StoreConfig()

        self._lock = threading.RLock()
        self._mode: Optional[SyncMode] = None
        self._gateway: Optional[RemoteSyncGateway] = None
        self._data_source: Optional[IDataSource] = None
        self._subscriptions: List[Subscription] = []
        # Cada arranque abre una generación nueva; callbacks de
        # generaciones anteriores se descartan
        self._generation = 0

    # =========================================================================
    # ESTADO
    # =========================================================================

    @property
    def mode(self) -> Optional[SyncMode]:
        return self._mode

    @property
    def is_local(self) -> bool:
        return self._mode == SyncMode.LOCAL

    @property
    def data_source(self) -> IDataSource:
        """Ruta de escritura activa."""
        with self._lock:
            if self._data_source is None:
                self.start()
            return self._data_source

    def status(self) -> dict:
        """Datos para el banner de modo."""
        local = self.is_local
        # Sin credenciales de Firestore no hay nube a la cual reintentar
        remote_available = self.gateway_factory is not None
        return {
            'mode': self._mode.value if self._mode else None,
            'local': local,
            'loaded': self.state.loaded,
            'banner': 'Cloud Offline: Local Persistence Active' if local else None,
            'action': 'Retry Cloud Sync' if local and remote_available else None,
            'remoteAvailable': remote_available,
        }

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    def start(self) -> SyncMode:
        """
        Arranca en el modo que corresponda.

        Returns:
            Modo resultante
        """
        with self._lock:
            self._generation += 1
            generation = self._generation

            if self.settings_repo.get_mode() == SyncMode.LOCAL.value:
                logger.info("[SYNC] Modo local persistido; no se intenta Firestore")
                self._enter_local()
                return self._mode

            if self.gateway_factory is None:
                logger.info("[SYNC] Firestore no configurado; usando persistencia local")
                self._enter_local()
                return self._mode

            try:
                self._gateway = self.gateway_factory()
            except Exception as exc:
                self._downgrade(SyncError(f"No se pudo crear el cliente de Firestore: {exc}"))
                return self._mode

            self._mode = SyncMode.REMOTE
            self._data_source = RemoteDataSource(self.state, self._gateway)

            openers = (
                lambda: self._gateway.subscribe_config(
                    self._guard(generation, self._on_config), self._guard(generation, self._on_sync_error)
                ),
                lambda: self._gateway.subscribe_products(
                    self._guard(generation, self._on_products), self._guard(generation, self._on_sync_error)
                ),
                lambda: self._gateway.subscribe_orders(
                    self._guard(generation, self._on_orders), self._guard(generation, self._on_sync_error)
                ),
            )
            for open_subscription in openers:
                if self._mode != SyncMode.REMOTE:
                    break
                try:
                    self._subscriptions.append(open_subscription())
                except SyncError as exc:
                    self._on_sync_error(exc)

            # Un callback pudo degradar el modo mientras se abrían las demás
            if self._mode == SyncMode.LOCAL:
                self._unsubscribe_all()
            else:
                logger.info("[SYNC] Modo remoto activo")
            return self._mode

    def stop(self) -> None:
        """Cancela las suscripciones (cierre del proceso)."""
        with self._lock:
            self._generation += 1
            self._unsubscribe_all()

    def reset(self) -> SyncMode:
        """
        "Retry Cloud Sync": borra el flag persistido y arranca de cero.
        """
        with self._lock:
            logger.info("[SYNC] Reset de modo solicitado")
            self.settings_repo.clear_mode()
            self._unsubscribe_all()
            self._mode = None
            self._gateway = None
            self._data_source = None
            return self.start()

    # =========================================================================
    # CALLBACKS DE SUSCRIPCIÓN
    # =========================================================================

    def _guard(self, generation: int, handler: Callable) -> Callable:
        def wrapped(payload):
            with self._lock:
                if generation != self._generation or self._mode != SyncMode.REMOTE:
                    return
                handler(payload)
        return wrapped

    def _on_config(self, config: Optional[StoreConfig]) -> None:
        if config is None:
            # Documento ausente: se siembra el default (no es un error)
            logger.info("[SYNC] settings/store no existe; escribiendo configuración por defecto")
            try:
                self._gateway.set_config(self.default_config)
            except WriteError as exc:
                self._on_sync_error(SyncError(str(exc)))
                return
            self.state.replace_config(self.default_config)
            return
        self.state.replace_config(config)

    def _on_products(self, products: List[Product]) -> None:
        # Colección vacía: se muestra el catálogo semilla sin escribirlo
        self.state.replace_products(products or seed_products())

    def _on_orders(self, orders: List[Order]) -> None:
        self.state.replace_orders(orders)

    def _on_sync_error(self, error: Exception) -> None:
        with self._lock:
            if self._mode == SyncMode.LOCAL:
                return
            self._downgrade(error)

    # =========================================================================
    # TRANSICIONES
    # =========================================================================

    def _downgrade(self, error: Exception) -> None:
        logger.warning(f"[SYNC] Error de sincronización, pasando a modo local: {error}")
        self.settings_repo.set_mode(SyncMode.LOCAL.value)
        self._unsubscribe_all()
        self._enter_local()

    def _enter_local(self) -> None:
        self._mode = SyncMode.LOCAL
        self._gateway = None
        self.state.replace_config(self.snapshot_store.load_config(self.default_config))
        self.state.replace_orders(self.snapshot_store.load_orders())
        self.state.replace_products(self.snapshot_store.load_products())
        self._data_source = LocalDataSource(self.state, self.snapshot_store)
        logger.info(f"[LOCAL] Hidratado desde snapshot: {len(self.state.products)} productos, "
                    f"{len(self.state.orders)} pedidos")

    def _unsubscribe_all(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.unsubscribe()
