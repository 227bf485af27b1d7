# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Este módulo define todas las entidades del dominio usando dataclasses.
# Independientes del mecanismo de persistencia (Firestore o JSON local).
# ==============================================================================

from .entities import (
    # Catálogo
    Product,
    Category,
    CategorySelector,
    StoreConfig,

    # Carrito y bundle
    CartItem,
    Bundle,

    # Pedidos
    Customer,
    Order,

    # Persistencia
    SyncMode,

    # Constantes
    DEFAULT_CITIES,
    DEFAULT_ITEM_PRICE,
    DEFAULT_BUNDLE_ITEM_COUNT,
    BUNDLE_ID,
    BUNDLE_NAME,
)
from .seed import seed_products

__all__ = [
    'Product',
    'Category',
    'CategorySelector',
    'StoreConfig',
    'CartItem',
    'Bundle',
    'Customer',
    'Order',
    'SyncMode',
    'DEFAULT_CITIES',
    'DEFAULT_ITEM_PRICE',
    'DEFAULT_BUNDLE_ITEM_COUNT',
    'BUNDLE_ID',
    'BUNDLE_NAME',
    'seed_products',
]
