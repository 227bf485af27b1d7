# ==============================================================================
# REPOSITORIO BASE - Funcionalidad común para acceso a archivos JSON
# ==============================================================================

import json
import os
from typing import Any, Dict, Optional
from abc import ABC, abstractmethod
import threading


class BaseRepository(ABC):
    """
    Clase base abstracta para los repositorios en disco.
    Proporciona lectura/escritura de archivos JSON con escritura atómica
    (archivo temporal + os.replace) y un lock global de archivos.

    Una caída a mitad de escritura solo puede perder el último snapshot
    completo; nunca deja el archivo a medio escribir.
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    # Si es True, el archivo se crea vacío al inicializar
    create_on_init = True

    def __init__(self, file_path: str):
        """
        Inicializa el repositorio con la ruta al archivo JSON.

        Args:
            file_path: Ruta absoluta al archivo JSON de datos
        """
        self.file_path = file_path
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if self.create_on_init:
            self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Crea el archivo con datos vacíos si no existe."""
        if not os.path.exists(self.file_path):
            self._write_raw(self._empty_data())

    @abstractmethod
    def _empty_data(self) -> Any:
        """
        Retorna la estructura de datos vacía para este repositorio.

        Returns:
            Estructura vacía (dict, list, None) según el repositorio
        """
        pass

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.

        Returns:
            Datos parseados del JSON; datos vacíos si el archivo
            no existe o está corrupto
        """
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (json.JSONDecodeError, FileNotFoundError, UnicodeDecodeError):
                return self._empty_data()

    def _write_raw(self, data: Any) -> None:
        """
        Escribe datos al archivo JSON (reemplazo completo, atómico).

        Args:
            data: Datos a serializar y escribir

        Raises:
            OSError: Si hay error de escritura
        """
        with self._file_lock:
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except Exception:
                # Limpiar archivo temporal si algo falla
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise


class DictRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como diccionario.

    Ejemplo: settings.json -> {"_app": {...}, "<client_id>": {...}}
    """

    def _empty_data(self) -> Dict:
        return {}

    def get_all(self) -> Dict[str, Any]:
        data = self._read_raw()
        return data if isinstance(data, dict) else {}

    def save_all(self, data: Dict[str, Any]) -> None:
        self._write_raw(data)


class SnapshotRepository(BaseRepository):
    """
    Blob serializado de una colección completa (snapshot, no log).

    A diferencia de DictRepository, NO crea el archivo al iniciar:
    "no existe" y "corrupto" se reportan como None para que el llamador
    use su propio default (catálogo semilla, config por defecto, []).
    """

    create_on_init = False

    # Tipo JSON esperado en la raíz del archivo (list o dict)
    expected_type: type = list

    def _empty_data(self) -> Optional[Any]:
        return None

    def load(self) -> Optional[Any]:
        """
        Carga el snapshot.

        Returns:
            Datos deserializados o None si falta, está corrupto
            o tiene otra forma
        """
        data = self._read_raw()
        if not isinstance(data, self.expected_type):
            return None
        return data

    def save(self, data: Any) -> None:
        """Reescribe el snapshot completo."""
        self._write_raw(data)
