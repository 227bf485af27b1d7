"""Logger de la aplicación (salida a consola con etiquetas [SYNC], [LOCAL], ...)."""
import logging

_ROOT_NAME = "uniprice"

_root = logging.getLogger(_ROOT_NAME)
if not _root.handlers:
    h = logging.StreamHandler()
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    h.setFormatter(fmt)
    _root.addHandler(h)
    _root.setLevel(logging.INFO)


def get_logger(name: str = None):
    if not name:
        return _root
    return _root.getChild(name)
