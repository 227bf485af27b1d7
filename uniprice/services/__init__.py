# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Los servicios NO conocen Firestore ni los archivos JSON: trabajan sobre
# StoreState y la ruta de persistencia activa que entrega el ModeController.
#
# ESTRUCTURA:
# ├── store_state.py          → Colecciones en memoria (products/orders/config)
# ├── data_sources.py         → RemoteDataSource / LocalDataSource
# ├── mode_controller.py      → Máquina REMOTE ⇄ LOCAL
# ├── catalog_service.py      → Precio global + filtros + favoritos
# ├── cart_service.py         → Carrito en sesión
# ├── bundle_service.py       → Bundle de capacidad fija
# ├── ai_service.py           → Gemini (sugerencias y visión)
# ├── concierge_service.py    → Bundle sugerido por IA
# ├── checkout_service.py     → Pedido contra entrega
# ├── inventory_service.py    → Panel admin: productos, config, pedidos
# ├── image_service.py        → URL manual, Drive, análisis visual
# ├── notification_service.py → Tokens push y aviso en primer plano
# └── auth_service.py         → Login del administrador
# ==============================================================================

from uniprice.services.store_state import StoreState
from uniprice.services.data_sources import LocalDataSource, RemoteDataSource
from uniprice.services.mode_controller import ModeController
from uniprice.services.catalog_service import (
    CatalogService,
    filter_catalog,
    parse_selector,
    project_prices,
)
from uniprice.services.cart_service import CartService
from uniprice.services.bundle_service import BundleService, build_bundle_line
from uniprice.services.ai_service import GeminiService
from uniprice.services.concierge_service import ConciergeService
from uniprice.services.checkout_service import CheckoutService
from uniprice.services.image_service import ImageService, normalize_image_url
from uniprice.services.inventory_service import InventoryService, parse_import_rows
from uniprice.services.notification_service import NotificationService, foreground_alert
from uniprice.services.auth_service import AuthService

__all__ = [
    'StoreState',
    'LocalDataSource',
    'RemoteDataSource',
    'ModeController',
    'CatalogService',
    'filter_catalog',
    'parse_selector',
    'project_prices',
    'CartService',
    'BundleService',
    'build_bundle_line',
    'GeminiService',
    'ConciergeService',
    'CheckoutService',
    'ImageService',
    'normalize_image_url',
    'InventoryService',
    'parse_import_rows',
    'NotificationService',
    'foreground_alert',
    'AuthService',
]
