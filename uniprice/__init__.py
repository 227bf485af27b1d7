"""Tienda de precio único: catálogo, carrito, bundles y panel admin."""

__version__ = "1.0.0"
