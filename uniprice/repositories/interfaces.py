# ==============================================================================
# INTERFACES DE PERSISTENCIA
# ==============================================================================
#
# Los servicios dependen de estas interfaces, NO de implementaciones:
#
# 1. IDataSource
#    - Ruta de escritura activa (remota o local), elegida por el
#      Mode Controller. Los servicios nunca saben cuál está activa.
#
# 2. ISettingsRepository
#    - Preferencias locales durables (modo, favoritos, tokens).
#
# 3. TESTING
#    - Fácil crear fakes que implementen estas interfaces
#
# ==============================================================================

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from uniprice.models.entities import Customer, CartItem, Order, Product, StoreConfig


@runtime_checkable
class IDataSource(Protocol):
    """
    Ruta de persistencia activa.

    Implementaciones: RemoteDataSource (Firestore), LocalDataSource (JSON).
    """

    def add_product(self, product: Product) -> Product:
        """Crea un producto; retorna el producto con su id definitivo."""
        ...

    def update_product(self, product: Product) -> bool:
        """Actualiza un producto existente."""
        ...

    def delete_product(self, product_id: str) -> bool:
        """Elimina un producto."""
        ...

    def update_config(self, config: StoreConfig) -> None:
        """Reemplaza la configuración de tienda."""
        ...

    def create_order(
        self,
        customer: Customer,
        items: List[CartItem],
        total: int,
        timestamp: int
    ) -> Order:
        """Crea un pedido (inmutable)."""
        ...

    def clear_orders(self) -> None:
        """Vacía la vista de pedidos."""
        ...


@runtime_checkable
class ISettingsRepository(Protocol):
    """
    Interfaz para el repositorio de preferencias locales.
    """

    def get_mode(self) -> Optional[str]:
        ...

    def set_mode(self, mode: str) -> None:
        ...

    def clear_mode(self) -> None:
        ...

    def get_favorites(self, client_id: str) -> List[str]:
        ...

    def set_favorites(self, client_id: str, favorites: List[str]) -> None:
        ...

    def get_valid_drive_token(self, now_ms: Optional[int] = None) -> Optional[str]:
        ...

    def set_drive_token(self, token: str, expires_in: int) -> int:
        ...

    def clear_drive_token(self) -> None:
        ...

    def get_setting(self, section: str, key: str, default: Any = None) -> Any:
        ...

    def load(self) -> Dict[str, Dict[str, Any]]:
        ...
