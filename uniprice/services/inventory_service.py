# ==============================================================================
# SERVICIO DE INVENTARIO (panel admin)
# ==============================================================================
# Centraliza la lógica de negocio del panel de administración:
#   - CRUD de productos por la ruta de persistencia activa
#   - Configuración global (precio único y capacidad del bundle)
#   - Vista de pedidos (solo lectura + "clear")
#   - Importación masiva CSV / JSON
#
# El precio guardado en cada producto se iguala al precio global vigente.
# ==============================================================================

import csv
import io
import json
from typing import Any, Dict, List, Optional

from uniprice.errors import UnipriceError, ValidationError
from uniprice.models.entities import Category, Product, StoreConfig
from uniprice.services.image_service import normalize_image_url
from uniprice.services.mode_controller import ModeController
from uniprice.services.store_state import StoreState
from uniprice.utils.logger import get_logger

logger = get_logger("inventory")


class InventoryService:
    """
    Servicio para gestión de inventario.

    Responsabilidades:
    - CRUD de productos
    - Actualización de StoreConfig
    - Pedidos (lectura y limpieza de la vista)
    - Importación masiva

    Args:
        state: Estado en memoria
        mode_controller: Provee la ruta de persistencia activa
    """

    def __init__(self, state: StoreState, mode_controller: ModeController):
        self.state = state
        self.mode_controller = mode_controller

    @property
    def data_source(self):
        return self.mode_controller.data_source

    # =========================================================================
    # OPERACIONES DE PRODUCTOS
    # =========================================================================

    def list_products(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.state.products]

    def build_product(self, data: Optional[Dict[str, Any]], product_id: str = '') -> Product:
        """
        Construye un Product desde el formulario.

        Raises:
            ValidationError: Falta nombre o imagen
        """
        data = data or {}
        name = str(data.get('name') or '').strip()
        image = normalize_image_url(str(data.get('image') or '').strip())
        if not name:
            raise ValidationError('El nombre es requerido', field='name')
        if not image:
            raise ValidationError('La imagen es requerida', field='image')

        return Product(
            id=product_id,
            name=name,
            price=self.state.config.item_price,
            category=Category.parse(data.get('category'), Category.SNACKS),
            image=image,
            description=str(data.get('description') or '').strip(),
        )

    def create_product(self, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Crea un producto.

        Returns:
            Dict con ok, product (o error)
        """
        try:
            product = self.build_product(data)
            created = self.data_source.add_product(product)
        except ValidationError as exc:
            return {'ok': False, 'error': str(exc), 'field': exc.field}
        except UnipriceError as exc:
            logger.error(f"[INVENTARIO] Error creando producto: {exc}")
            return {'ok': False, 'error': 'No se pudo guardar el producto'}

        logger.info(f"[INVENTARIO] Producto creado: {created.id} ({created.name})")
        return {'ok': True, 'product': created.to_dict()}

    def update_product(self, product_id: str, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if self.state.find_product(product_id) is None:
            return {'ok': False, 'error': 'Producto no encontrado', 'not_found': True}

        try:
            product = self.build_product(data, product_id=product_id)
            updated = self.data_source.update_product(product)
        except ValidationError as exc:
            return {'ok': False, 'error': str(exc), 'field': exc.field}
        except UnipriceError as exc:
            logger.error(f"[INVENTARIO] Error actualizando producto {product_id}: {exc}")
            return {'ok': False, 'error': 'No se pudo actualizar el producto'}

        if not updated:
            return {'ok': False, 'error': 'Producto no encontrado', 'not_found': True}
        return {'ok': True, 'product': product.to_dict()}

    def delete_product(self, product_id: str) -> Dict[str, Any]:
        if self.state.find_product(product_id) is None:
            return {'ok': False, 'error': 'Producto no encontrado', 'not_found': True}

        try:
            removed = self.data_source.delete_product(product_id)
        except UnipriceError as exc:
            logger.error(f"[INVENTARIO] Error eliminando producto {product_id}: {exc}")
            return {'ok': False, 'error': 'No se pudo eliminar el producto'}

        if not removed:
            return {'ok': False, 'error': 'Producto no encontrado', 'not_found': True}
        logger.info(f"[INVENTARIO] Producto eliminado: {product_id}")
        return {'ok': True}

    # =========================================================================
    # CONFIGURACIÓN
    # =========================================================================

    def get_config(self) -> Dict[str, Any]:
        config = self.state.config
        return {**config.to_dict(), 'bundlePrice': config.bundle_price}

    def update_config(self, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Cambia precio global y/o capacidad del bundle.

        Campos ausentes conservan el valor actual.
        """
        data = data or {}
        current = self.state.config
        try:
            config = StoreConfig(
                item_price=int(data.get('itemPrice', current.item_price)),
                bundle_item_count=int(data.get('bundleItemCount', current.bundle_item_count)),
            )
        except (TypeError, ValueError) as exc:
            return {'ok': False, 'error': f'Configuración inválida: {exc}'}

        try:
            self.data_source.update_config(config)
        except UnipriceError as exc:
            logger.error(f"[INVENTARIO] Error guardando configuración: {exc}")
            return {'ok': False, 'error': 'No se pudo guardar la configuración'}

        logger.info(f"[INVENTARIO] Configuración: itemPrice={config.item_price}, "
                    f"bundleItemCount={config.bundle_item_count}")
        return {'ok': True, 'config': {**config.to_dict(), 'bundlePrice': config.bundle_price}}

    # =========================================================================
    # PEDIDOS
    # =========================================================================

    def list_orders(self) -> List[Dict[str, Any]]:
        return [o.to_dict() for o in self.state.orders]

    def clear_orders(self) -> Dict[str, Any]:
        """Vacía la vista; en modo local también el snapshot."""
        self.data_source.clear_orders()
        return {'ok': True, 'local': self.mode_controller.is_local}

    # =========================================================================
    # IMPORTACIÓN MASIVA
    # =========================================================================

    def bulk_import(self, content: str, filename: str = '') -> Dict[str, Any]:
        """
        Importa productos desde CSV (con encabezado) o un arreglo JSON.

        Cada fila válida pasa por create_product(); las filas sin nombre o
        imagen se omiten y se cuentan.

        Returns:
            Dict con ok, imported, skipped, failed
        """
        try:
            rows = parse_import_rows(content, filename)
        except ValueError as exc:
            return {'ok': False, 'error': str(exc)}

        imported, skipped, failed = 0, 0, 0
        for row in rows:
            if not str(row.get('name') or '').strip() or not str(row.get('image') or '').strip():
                skipped += 1
                continue
            result = self.create_product(row)
            if result['ok']:
                imported += 1
            else:
                failed += 1

        logger.info(f"[INVENTARIO] Importación: {imported} creados, {skipped} omitidos, {failed} fallidos")
        return {'ok': True, 'imported': imported, 'skipped': skipped, 'failed': failed}


def parse_import_rows(content: str, filename: str = '') -> List[Dict[str, Any]]:
    """
    Detecta el formato y retorna filas como diccionarios.

    Raises:
        ValueError: JSON que no es un arreglo o contenido vacío
    """
    text = (content or '').lstrip('\ufeff').strip()
    if not text:
        raise ValueError('El archivo está vacío')

    is_json = filename.lower().endswith('.json') or text[0] in '[{'
    if is_json:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f'JSON inválido: {exc}') from exc
        if not isinstance(data, list):
            raise ValueError('El JSON debe ser un arreglo de productos')
        return [row for row in data if isinstance(row, dict)]

    reader = csv.DictReader(io.StringIO(text))
    return [_normalize_csv_row(row) for row in reader]


def _normalize_csv_row(row: Dict[str, Any]) -> Dict[str, Any]:
    # Encabezados sin distinguir mayúsculas ni espacios
    return {
        str(key).strip().lower(): (value or '').strip()
        for key, value in row.items()
        if key is not None
    }
