# ==============================================================================
# REPOSITORIOS DE SNAPSHOT LOCAL
# ==============================================================================
# Persistencia durable usada SOLO en modo local.
# Tres blobs independientes con nombres fijos:
#   products.json      → lista completa de productos
#   orders.json        → lista completa de pedidos (más reciente primero)
#   store_config.json  → documento de configuración
#
# Cada mutación en modo local reescribe la colección completa (sin diffs).
# Un blob faltante o corrupto no bloquea la carga de los otros dos.
# ==============================================================================

import os
from typing import List, Optional

from uniprice.models.entities import Order, Product, StoreConfig
from uniprice.models.seed import seed_products
from uniprice.repositories.base import SnapshotRepository


class ProductSnapshotRepository(SnapshotRepository):
    """Snapshot del catálogo (products.json)."""

    FILE_NAME = 'products.json'

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, self.FILE_NAME))


class OrderSnapshotRepository(SnapshotRepository):
    """Snapshot del historial de pedidos (orders.json)."""

    FILE_NAME = 'orders.json'

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, self.FILE_NAME))


class ConfigSnapshotRepository(SnapshotRepository):
    """Snapshot de la configuración de tienda (store_config.json)."""

    FILE_NAME = 'store_config.json'
    expected_type = dict

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, self.FILE_NAME))


class LocalSnapshotStore:
    """
    Fachada tipada sobre los tres snapshots.

    Convierte documentos JSON ↔ entidades y aplica los defaults de
    hidratación en frío:
    - productos: catálogo semilla si no hay snapshot
    - pedidos: lista vacía
    - config: StoreConfig por defecto
    """

    def __init__(
        self,
        products_repo: ProductSnapshotRepository,
        orders_repo: OrderSnapshotRepository,
        config_repo: ConfigSnapshotRepository
    ):
        self.products_repo = products_repo
        self.orders_repo = orders_repo
        self.config_repo = config_repo

    @classmethod
    def at(cls, base_path: str) -> 'LocalSnapshotStore':
        """Crea el store con los tres repositorios bajo base_path."""
        return cls(
            ProductSnapshotRepository(base_path),
            OrderSnapshotRepository(base_path),
            ConfigSnapshotRepository(base_path),
        )

    # =========================================================================
    # LECTURA (hidratación en frío)
    # =========================================================================

    def load_products(self) -> List[Product]:
        raw = self.products_repo.load()
        if raw is None:
            return seed_products()
        return [Product.from_dict(p) for p in raw if isinstance(p, dict)]

    def load_orders(self) -> List[Order]:
        raw = self.orders_repo.load()
        if raw is None:
            return []
        return [Order.from_dict(o) for o in raw if isinstance(o, dict)]

    def load_config(self, default: Optional[StoreConfig] = None) -> StoreConfig:
        raw = self.config_repo.load()
        if raw is None:
            return default or StoreConfig()
        return StoreConfig.from_dict(raw)

    # =========================================================================
    # ESCRITURA (snapshot completo)
    # =========================================================================

    def save_products(self, products: List[Product]) -> None:
        self.products_repo.save([p.to_dict() for p in products])

    def save_orders(self, orders: List[Order]) -> None:
        self.orders_repo.save([o.to_dict() for o in orders])

    def save_config(self, config: StoreConfig) -> None:
        self.config_repo.save(config.to_dict())

    def clear_orders(self) -> None:
        self.orders_repo.save([])
