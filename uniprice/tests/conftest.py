import pytest

from uniprice.app_container import AppContainer
from uniprice.models.entities import StoreConfig
from uniprice.repositories.remote_gateway import RemoteSyncGateway
from uniprice.repositories.settings_repository import SettingsRepository
from uniprice.repositories.snapshot_repository import LocalSnapshotStore
from uniprice.services.store_state import StoreState
from uniprice.tests.fakes import FakeFirestore, FakeHTTP


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / 'data')


@pytest.fixture
def settings_repo(data_dir):
    return SettingsRepository(data_dir)


@pytest.fixture
def snapshot_store(data_dir):
    return LocalSnapshotStore.at(data_dir)


@pytest.fixture
def state():
    return StoreState(StoreConfig())


@pytest.fixture
def firestore_db():
    return FakeFirestore()


@pytest.fixture
def gateway_factory(firestore_db):
    return lambda: RemoteSyncGateway(firestore_db)


@pytest.fixture
def http():
    return FakeHTTP()


@pytest.fixture(autouse=True)
def reset_container():
    yield
    AppContainer.reset_instance()
