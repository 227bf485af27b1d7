# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la persistencia.
#
# ESTRUCTURA:
# ├── interfaces.py           → Protocolos (IDataSource, ISettingsRepository)
# ├── base.py                 → Clases base JSON (DictRepository, SnapshotRepository)
# ├── snapshot_repository.py  → Snapshots locales products/orders/store_config
# ├── settings_repository.py  → Acceso a settings.json (modo, favoritos, tokens)
# └── remote_gateway.py       → Firestore: suscripciones en vivo y escrituras
# ==============================================================================

from uniprice.repositories.interfaces import (
    IDataSource,
    ISettingsRepository,
)

from uniprice.repositories.base import BaseRepository, DictRepository, SnapshotRepository
from uniprice.repositories.snapshot_repository import (
    ProductSnapshotRepository,
    OrderSnapshotRepository,
    ConfigSnapshotRepository,
    LocalSnapshotStore,
)
from uniprice.repositories.settings_repository import SettingsRepository, APP_SECTION
from uniprice.repositories.remote_gateway import (
    RemoteSyncGateway,
    Subscription,
    create_firestore_client,
)

__all__ = [
    # Interfaces
    'IDataSource',
    'ISettingsRepository',

    # Clases base
    'BaseRepository',
    'DictRepository',
    'SnapshotRepository',

    # Implementaciones JSON
    'ProductSnapshotRepository',
    'OrderSnapshotRepository',
    'ConfigSnapshotRepository',
    'LocalSnapshotStore',
    'SettingsRepository',
    'APP_SECTION',

    # Firestore
    'RemoteSyncGateway',
    'Subscription',
    'create_firestore_client',
]
