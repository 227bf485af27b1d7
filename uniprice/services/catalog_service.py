# ==============================================================================
# SERVICIO DE CATÁLOGO Y PRECIOS
# ==============================================================================
# Derivación pura del catálogo visible:
#   1. Proyección de precio: cada producto muestra StoreConfig.item_price
#   2. Filtro por selector: categoría fija, "All" o "Favorites"
#   3. Links viejos de Drive se muestran como URL embebible
#
# Los favoritos son locales a cada cliente y nunca se sincronizan.
# ==============================================================================

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Union

from uniprice.models.entities import Category, CategorySelector, Product, StoreConfig
from uniprice.repositories.interfaces import ISettingsRepository
from uniprice.services.image_service import normalize_image_url
from uniprice.services.store_state import StoreState


def display_product(product: Product, config: StoreConfig) -> Product:
    """Copia para mostrar: precio global y link de imagen embebible."""
    return replace(
        product,
        price=config.item_price,
        image=normalize_image_url(product.image),
    )


def project_prices(products: Iterable[Product], config: StoreConfig) -> List[Product]:
    """Copias de los productos con el precio global aplicado."""
    return [display_product(p, config) for p in products]


def parse_selector(value: Any) -> Union[Category, CategorySelector]:
    """
    Convierte el parámetro ?category= en un selector.

    Raises:
        ValueError: Si no es una categoría ni un selector especial
    """
    if value is None or value == '':
        return CategorySelector.ALL
    if isinstance(value, (Category, CategorySelector)):
        return value
    for selector in CategorySelector:
        if str(value).strip().lower() == selector.value.lower():
            return selector
    category = Category.parse(value)
    if category is None:
        raise ValueError(f"Categoría desconocida: {value}")
    return category


def filter_catalog(
    products: Iterable[Product],
    selector: Union[Category, CategorySelector, str],
    favorites: Iterable[str] = ()
) -> List[Product]:
    """
    Subconjunto visible para un selector.

    "Favorites" con un conjunto vacío retorna lista vacía.
    """
    selector = parse_selector(selector)
    products = list(products)
    if selector == CategorySelector.ALL:
        return products
    if selector == CategorySelector.FAVORITES:
        favorite_ids = set(favorites)
        return [p for p in products if p.id in favorite_ids]
    return [p for p in products if p.category == selector]


class CatalogService:
    """
    Vista del catálogo para la tienda.

    Args:
        state: Estado en memoria (productos + config)
        settings_repo: Persistencia de favoritos
    """

    def __init__(self, state: StoreState, settings_repo: ISettingsRepository):
        self.state = state
        self.settings_repo = settings_repo

    def get_products(self) -> List[Product]:
        """Catálogo completo con precio proyectado."""
        return project_prices(self.state.products, self.state.config)

    def get_product(self, product_id: str) -> Optional[Product]:
        """Producto con precio proyectado, o None."""
        product = self.state.find_product(str(product_id))
        if product is None:
            return None
        return display_product(product, self.state.config)

    def list_products(self, selector: Any = None, client_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Catálogo filtrado para la tienda.

        Returns:
            Dict con ok, products, favorites, category
        """
        try:
            parsed = parse_selector(selector)
        except ValueError as exc:
            return {'ok': False, 'error': str(exc)}

        favorites = self.get_favorites(client_id)
        products = filter_catalog(self.get_products(), parsed, favorites)
        config = self.state.config
        return {
            'ok': True,
            'category': parsed.value,
            'products': [p.to_dict() for p in products],
            'favorites': favorites,
            'itemPrice': config.item_price,
            'bundleItemCount': config.bundle_item_count,
            'bundlePrice': config.bundle_price,
            'loaded': self.state.loaded,
        }

    # =========================================================================
    # FAVORITOS
    # =========================================================================

    def get_favorites(self, client_id: Optional[str]) -> List[str]:
        if not client_id:
            return []
        return self.settings_repo.get_favorites(client_id)

    def toggle_favorite(self, client_id: str, product_id: str) -> Dict[str, Any]:
        """Agrega o quita un producto de los favoritos del cliente."""
        if not client_id:
            return {'ok': False, 'error': 'Cliente no identificado'}
        if not product_id:
            return {'ok': False, 'error': 'ID de producto inválido'}

        product_id = str(product_id)
        favorites = self.get_favorites(client_id)
        if product_id in favorites:
            favorites = [f for f in favorites if f != product_id]
            is_favorite = False
        else:
            favorites.append(product_id)
            is_favorite = True

        self.settings_repo.set_favorites(client_id, favorites)
        return {'ok': True, 'favorite': is_favorite, 'favorites': favorites}
