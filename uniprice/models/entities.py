# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Diseñadas para ser independientes del mecanismo de persistencia
# (Firestore remoto o snapshots JSON locales).
#
# Los diccionarios que viajan a Firestore / JSON usan las claves del documento
# remoto (itemPrice, bundleItemCount, ...). La conversión documento → entidad
# ocurre SOLO en from_dict(): ningún payload sin tipar entra al núcleo.
# ==============================================================================

from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Any
from enum import Enum


# ==============================================================================
# ENUMERACIONES - Categorías y modos válidos
# ==============================================================================

class Category(str, Enum):
    """Categorías fijas del catálogo."""
    SNACKS = "Snacks"
    STATIONERY = "Stationery"
    HOUSEWARE = "Houseware"
    GADGETS = "Gadgets"
    SELF_CARE = "Self-Care"

    @classmethod
    def parse(cls, value: Any, default: Optional['Category'] = None) -> Optional['Category']:
        """Convierte un string a Category; retorna default si no es válido."""
        if isinstance(value, cls):
            return value
        if value is None:
            return default
        text = str(value).strip().lower()
        for category in cls:
            if category.value.lower() == text:
                return category
        return default


class CategorySelector(str, Enum):
    """Selectores especiales del catálogo (además de cada categoría)."""
    ALL = "All"
    FAVORITES = "Favorites"


class SyncMode(str, Enum):
    """Modos de persistencia del Mode Controller."""
    REMOTE = "remote"   # Firestore con suscripciones en vivo
    LOCAL = "local"     # Snapshots JSON en disco


# Ciudades con entrega contra reembolso (la primera es la opción por defecto)
DEFAULT_CITIES = ('Karachi', 'Lahore', 'Islamabad', 'Faisalabad', 'Rawalpindi')

DEFAULT_ITEM_PRICE = 100
DEFAULT_BUNDLE_ITEM_COUNT = 6

BUNDLE_ID = 'super-saver'
BUNDLE_NAME = 'Super Saver Bundle'


def _to_int(value: Any, default: int = 0) -> int:
    """Convierte a int tolerando strings, floats y None."""
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


# ==============================================================================
# CATÁLOGO
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo.

    Attributes:
        id: Identificador único y estable (id del documento remoto)
        name: Nombre visible
        price: Precio guardado al momento de escribir; para mostrar/cobrar
               manda StoreConfig.item_price
        category: Una de las categorías fijas
        image: URI de la imagen
        description: Descripción corta
    """
    id: str
    name: str
    price: int = DEFAULT_ITEM_PRICE
    category: Category = Category.SNACKS
    image: str = ''
    description: str = ''

    def with_price(self, price: int) -> 'Product':
        """Copia del producto con otro precio (no muta el original)."""
        return replace(self, price=price)

    def to_dict(self, include_id: bool = True) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        d = {
            'name': self.name,
            'price': self.price,
            'category': self.category.value if isinstance(self.category, Enum) else self.category,
            'image': self.image,
            'description': self.description,
        }
        if include_id:
            d = {'id': self.id, **d}
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> 'Product':
        """
        Crea instancia desde un documento.

        Args:
            data: Documento crudo (Firestore o JSON)
            doc_id: Id del documento remoto; tiene prioridad sobre data['id']
        """
        return cls(
            id=str(doc_id if doc_id is not None else data.get('id', '')),
            name=str(data.get('name', '') or ''),
            price=_to_int(data.get('price'), DEFAULT_ITEM_PRICE),
            category=Category.parse(data.get('category'), Category.SNACKS),
            image=str(data.get('image', '') or ''),
            description=str(data.get('description', '') or ''),
        )


@dataclass
class StoreConfig:
    """
    Configuración global de la tienda (documento único).

    Attributes:
        item_price: Precio único de todos los productos (>= 0)
        bundle_item_count: Capacidad del bundle (>= 1)
    """
    item_price: int = DEFAULT_ITEM_PRICE
    bundle_item_count: int = DEFAULT_BUNDLE_ITEM_COUNT

    def __post_init__(self):
        if self.item_price < 0:
            raise ValueError('itemPrice debe ser >= 0')
        if self.bundle_item_count < 1:
            raise ValueError('bundleItemCount debe ser >= 1')

    @property
    def bundle_price(self) -> int:
        """floor(itemPrice × bundleItemCount × 0.9) en aritmética entera."""
        return (self.item_price * self.bundle_item_count * 9) // 10

    def to_dict(self) -> Dict[str, Any]:
        return {
            'itemPrice': self.item_price,
            'bundleItemCount': self.bundle_item_count,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'StoreConfig':
        """Crea instancia desde diccionario; valores inválidos usan el default."""
        data = data or {}
        item_price = _to_int(data.get('itemPrice'), DEFAULT_ITEM_PRICE)
        count = _to_int(data.get('bundleItemCount'), DEFAULT_BUNDLE_ITEM_COUNT)
        return cls(
            item_price=item_price if item_price >= 0 else DEFAULT_ITEM_PRICE,
            bundle_item_count=count if count >= 1 else DEFAULT_BUNDLE_ITEM_COUNT,
        )


# ==============================================================================
# CARRITO Y BUNDLE
# ==============================================================================

@dataclass
class CartItem:
    """
    Línea del carrito: todos los campos del producto + cantidad.
    El precio queda congelado al momento de agregar.
    """
    id: str
    name: str
    price: int
    category: Category = Category.SNACKS
    image: str = ''
    description: str = ''
    quantity: int = 1

    @property
    def line_total(self) -> int:
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'category': self.category.value if isinstance(self.category, Enum) else self.category,
            'image': self.image,
            'description': self.description,
            'quantity': self.quantity,
        }

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> 'CartItem':
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            category=product.category,
            image=product.image,
            description=product.description,
            quantity=quantity,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartItem':
        return cls(
            id=str(data.get('id', '')),
            name=str(data.get('name', '') or ''),
            price=_to_int(data.get('price'), 0),
            category=Category.parse(data.get('category'), Category.SNACKS),
            image=str(data.get('image', '') or ''),
            description=str(data.get('description', '') or ''),
            quantity=max(1, _to_int(data.get('quantity'), 1)),
        )


@dataclass
class Bundle:
    """
    Bundle de capacidad fija. Efímero: se reconstruye después de cada conversión.

    Attributes:
        max_items: Capacidad (StoreConfig.bundle_item_count)
        bundle_price: Precio fijo (StoreConfig.bundle_price)
        items: Productos en orden de selección (se permiten duplicados)
    """
    max_items: int
    bundle_price: int
    items: List[Product] = field(default_factory=list)
    id: str = BUNDLE_ID
    name: str = BUNDLE_NAME

    @property
    def is_full(self) -> bool:
        return len(self.items) == self.max_items

    @property
    def is_empty(self) -> bool:
        return not self.items

    def contains(self, product_id: str) -> bool:
        return any(item.id == product_id for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'maxItems': self.max_items,
            'bundlePrice': self.bundle_price,
            'items': [item.to_dict() for item in self.items],
            'isFull': self.is_full,
        }


# ==============================================================================
# PEDIDOS
# ==============================================================================

@dataclass
class Customer:
    """Datos de entrega del cliente (pago contra entrega)."""
    name: str
    phone: str
    address: str
    city: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'phone': self.phone,
            'address': self.address,
            'city': self.city,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Customer':
        data = data or {}
        return cls(
            name=str(data.get('name', '') or ''),
            phone=str(data.get('phone', '') or ''),
            address=str(data.get('address', '') or ''),
            city=str(data.get('city', '') or ''),
        )


@dataclass(frozen=True)
class Order:
    """
    Pedido. Solo se crea; nunca se modifica después.

    Attributes:
        timestamp: Epoch en milisegundos
    """
    id: str
    customer: Customer
    items: tuple
    total: int
    timestamp: int

    def to_dict(self, include_id: bool = True) -> Dict[str, Any]:
        d = {
            'customer': self.customer.to_dict(),
            'items': [item.to_dict() for item in self.items],
            'total': self.total,
            'timestamp': self.timestamp,
        }
        if include_id:
            d = {'id': self.id, **d}
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> 'Order':
        items = data.get('items') or []
        return cls(
            id=str(doc_id if doc_id is not None else data.get('id', '')),
            customer=Customer.from_dict(data.get('customer')),
            items=tuple(CartItem.from_dict(i) for i in items if isinstance(i, dict)),
            total=_to_int(data.get('total'), 0),
            timestamp=_to_int(data.get('timestamp'), 0),
        )
