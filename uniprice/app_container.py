# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (se inyecta un cliente de Firestore falso y una sesión HTTP falsa)
#   - Cambiar la fuente remota sin tocar servicios
#
# ═══════════════════════════════════════════════════════════════════════════════
# FUENTE REMOTA
# ═══════════════════════════════════════════════════════════════════════════════
#
# gateway_factory decide si hay modo remoto:
#   - Inyectado explícitamente (tests)
#   - Construido desde FIREBASE_CREDENTIALS
#   - None → la tienda arranca directo en modo local
# ==============================================================================

from typing import Any, Dict, Optional

import requests

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Capa de persistencia
# ═══════════════════════════════════════════════════════════════════════════════
from uniprice.repositories import (
    LocalSnapshotStore,
    RemoteSyncGateway,
    SettingsRepository,
    create_firestore_client,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from uniprice.services import (
    AuthService,
    BundleService,
    CartService,
    CatalogService,
    CheckoutService,
    ConciergeService,
    GeminiService,
    ImageService,
    InventoryService,
    ModeController,
    NotificationService,
    StoreState,
)
from uniprice.config import Config, dev_admin_password
from uniprice.models.entities import StoreConfig


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Implementa el patrón Singleton para asegurar una única instancia
    de cada repositorio y servicio.

    Uso:
        container = AppContainer(settings=app.config)
        catalog = container.catalog_service
        mode = container.mode_controller.mode
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, *args, **kwargs):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(
        self,
        settings: Optional[Dict[str, Any]] = None,
        gateway_factory=None,
        http: Optional[requests.Session] = None
    ):
        """
        Inicializa el contenedor.

        Args:
            settings: Opciones (app.config); por defecto Config
            gateway_factory: Crea el RemoteSyncGateway; None = según credenciales
            http: Sesión HTTP compartida por Gemini y Drive
        """
        if self._initialized:
            return

        self._settings = dict(settings) if settings is not None else Config.as_dict()
        self._gateway_factory = gateway_factory
        self._http = http

        # Repositorios (lazy loading)
        self._settings_repo: Optional[SettingsRepository] = None
        self._snapshot_store: Optional[LocalSnapshotStore] = None

        # Estado compartido y servicios (lazy loading)
        self._state: Optional[StoreState] = None
        self._mode_controller: Optional[ModeController] = None
        self._catalog_service: Optional[CatalogService] = None
        self._cart_service: Optional[CartService] = None
        self._bundle_service: Optional[BundleService] = None
        self._ai_service: Optional[GeminiService] = None
        self._concierge_service: Optional[ConciergeService] = None
        self._checkout_service: Optional[CheckoutService] = None
        self._inventory_service: Optional[InventoryService] = None
        self._image_service: Optional[ImageService] = None
        self._notification_service: Optional[NotificationService] = None
        self._auth_service: Optional[AuthService] = None

        self._initialized = True

    def setting(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    @property
    def data_dir(self) -> str:
        return self._settings['DATA_DIR']

    @property
    def default_config(self) -> StoreConfig:
        return StoreConfig(
            item_price=int(self.setting('DEFAULT_ITEM_PRICE', 100)),
            bundle_item_count=int(self.setting('DEFAULT_BUNDLE_ITEM_COUNT', 6)),
        )

    @property
    def http(self) -> requests.Session:
        if self._http is None:
            self._http = requests.Session()
        return self._http

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def settings_repo(self) -> SettingsRepository:
        """Repositorio de preferencias locales (singleton)."""
        if self._settings_repo is None:
            self._settings_repo = SettingsRepository(self.data_dir)
        return self._settings_repo

    @property
    def snapshot_store(self) -> LocalSnapshotStore:
        """Snapshots locales (singleton)."""
        if self._snapshot_store is None:
            self._snapshot_store = LocalSnapshotStore.at(self.data_dir)
        return self._snapshot_store

    def _build_gateway_factory(self):
        if self._gateway_factory is not None:
            return self._gateway_factory

        credentials_path = self.setting('FIREBASE_CREDENTIALS')
        if not credentials_path:
            return None

        def factory() -> RemoteSyncGateway:
            return RemoteSyncGateway(create_firestore_client(credentials_path))

        return factory

    # =========================================================================
    # ESTADO Y SERVICIOS
    # =========================================================================

    @property
    def state(self) -> StoreState:
        if self._state is None:
            self._state = StoreState(self.default_config)
        return self._state

    @property
    def mode_controller(self) -> ModeController:
        """Mode Controller (singleton)."""
        if self._mode_controller is None:
            self._mode_controller = ModeController(
                self.state,
                self.settings_repo,
                self.snapshot_store,
                gateway_factory=self._build_gateway_factory(),
                default_config=self.default_config,
            )
        return self._mode_controller

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(self.state, self.settings_repo)
        return self._catalog_service

    @property
    def cart_service(self) -> CartService:
        """Servicio de carrito (opera sobre la sesión de Flask)."""
        if self._cart_service is None:
            self._cart_service = CartService(self.state)
        return self._cart_service

    @property
    def bundle_service(self) -> BundleService:
        if self._bundle_service is None:
            self._bundle_service = BundleService(
                self.state,
                self.cart_service,
                duplicate_policy=self.setting('BUNDLE_DUPLICATE_POLICY', 'allow'),
                overflow_policy=self.setting('BUNDLE_OVERFLOW_POLICY', 'keep'),
            )
        return self._bundle_service

    @property
    def ai_service(self) -> GeminiService:
        if self._ai_service is None:
            self._ai_service = GeminiService(
                self.setting('GEMINI_API_KEY'),
                model=self.setting('GEMINI_MODEL', 'gemini-2.0-flash'),
                http=self.http,
            )
        return self._ai_service

    @property
    def concierge_service(self) -> ConciergeService:
        if self._concierge_service is None:
            self._concierge_service = ConciergeService(
                self.ai_service,
                self.catalog_service,
                self.bundle_service,
            )
        return self._concierge_service

    @property
    def checkout_service(self) -> CheckoutService:
        if self._checkout_service is None:
            self._checkout_service = CheckoutService(
                self.cart_service,
                self.mode_controller,
                cities=self.setting('CITIES'),
            )
        return self._checkout_service

    @property
    def inventory_service(self) -> InventoryService:
        if self._inventory_service is None:
            self._inventory_service = InventoryService(self.state, self.mode_controller)
        return self._inventory_service

    @property
    def image_service(self) -> ImageService:
        if self._image_service is None:
            self._image_service = ImageService(
                self.settings_repo,
                self.ai_service,
                folder_id=self.setting('DRIVE_FOLDER_ID', ''),
                http=self.http,
            )
        return self._image_service

    @property
    def notification_service(self) -> NotificationService:
        if self._notification_service is None:
            self._notification_service = NotificationService(self.settings_repo)
        return self._notification_service

    @property
    def auth_service(self) -> AuthService:
        if self._auth_service is None:
            self._auth_service = AuthService(
                self.setting('ADMIN_USERNAME', 'admin'),
                password_hash=self.setting('ADMIN_PASSWORD_HASH'),
                dev_password=dev_admin_password(),
            )
        return self._auth_service

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """
        Detiene las suscripciones y descarta todas las instancias.
        Útil para testing.
        """
        if self._mode_controller is not None:
            self._mode_controller.stop()

        self._settings_repo = None
        self._snapshot_store = None
        self._state = None
        self._mode_controller = None
        self._catalog_service = None
        self._cart_service = None
        self._bundle_service = None
        self._ai_service = None
        self._concierge_service = None
        self._checkout_service = None
        self._inventory_service = None
        self._image_service = None
        self._notification_service = None
        self._auth_service = None

    @classmethod
    def get_instance(cls, settings: Optional[Dict[str, Any]] = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.

        Args:
            settings: Opciones (solo se usan en la primera llamada)
        """
        if cls._instance is None:
            return cls(settings)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


# Función helper para obtener el contenedor global
def get_container(settings: Optional[Dict[str, Any]] = None) -> AppContainer:
    """
    Obtiene el contenedor de dependencias global.

    Args:
        settings: Opciones de la aplicación (primera llamada)
    """
    return AppContainer.get_instance(settings)
