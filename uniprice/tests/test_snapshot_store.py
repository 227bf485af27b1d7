import json
import os
import threading

from uniprice.models.entities import Customer, CartItem, Order, StoreConfig
from uniprice.models.seed import seed_products
from uniprice.repositories.snapshot_repository import LocalSnapshotStore
from uniprice.tests.fakes import make_product


def _order(oid, ts):
    return Order(
        id=oid,
        customer=Customer('Ali', '0300', 'Street 1', 'Karachi'),
        items=(CartItem.from_product(make_product('1'), quantity=2),),
        total=200,
        timestamp=ts,
    )


def test_cold_start_defaults(snapshot_store):
    assert [p.id for p in snapshot_store.load_products()] == [p.id for p in seed_products()]
    assert snapshot_store.load_orders() == []
    assert snapshot_store.load_config() == StoreConfig()
    assert snapshot_store.load_config(StoreConfig(50, 3)) == StoreConfig(50, 3)


def test_round_trip_reproduces_collections(data_dir, snapshot_store):
    products = [make_product('a', category='Gadgets'), make_product('b', category='Self-Care')]
    orders = [_order('o2', 2000), _order('o1', 1000)]
    config = StoreConfig(120, 4)

    snapshot_store.save_products(products)
    snapshot_store.save_orders(orders)
    snapshot_store.save_config(config)

    reloaded = LocalSnapshotStore.at(data_dir)
    assert reloaded.load_products() == products
    assert reloaded.load_orders() == orders
    assert reloaded.load_config() == config


def test_corrupt_blob_does_not_block_the_others(data_dir, snapshot_store):
    snapshot_store.save_orders([_order('o1', 1000)])
    snapshot_store.save_config(StoreConfig(80, 5))
    with open(os.path.join(data_dir, 'products.json'), 'w', encoding='utf-8') as f:
        f.write('{not json')

    assert len(snapshot_store.load_products()) == 12
    assert snapshot_store.load_orders()[0].id == 'o1'
    assert snapshot_store.load_config() == StoreConfig(80, 5)


def test_wrong_shape_is_treated_as_missing(data_dir, snapshot_store):
    with open(os.path.join(data_dir, 'store_config.json'), 'w', encoding='utf-8') as f:
        json.dump([1, 2, 3], f)
    assert snapshot_store.load_config() == StoreConfig()


def test_write_replaces_file_without_temp_leftovers(data_dir, snapshot_store):
    snapshot_store.save_products([make_product('a')])
    snapshot_store.save_products([make_product('b')])
    assert sorted(os.listdir(data_dir)) == ['products.json']
    assert [p.id for p in snapshot_store.load_products()] == ['b']


def test_clear_orders_persists_empty_list(snapshot_store):
    snapshot_store.save_orders([_order('o1', 1000)])
    snapshot_store.clear_orders()
    assert snapshot_store.load_orders() == []


# =========================================================================
# settings.json
# =========================================================================

def test_mode_flag_round_trip(settings_repo):
    assert settings_repo.get_mode() is None
    settings_repo.set_mode('local')
    assert settings_repo.get_mode() == 'local'
    settings_repo.clear_mode()
    assert settings_repo.get_mode() is None


def test_favorites_are_per_client(settings_repo):
    settings_repo.set_favorites('c1', ['1', '7'])
    assert settings_repo.get_favorites('c1') == ['1', '7']
    assert settings_repo.get_favorites('c2') == []


def test_drive_token_expiry(settings_repo):
    expiry = settings_repo.set_drive_token('tok', 3600)
    assert settings_repo.get_valid_drive_token(now_ms=expiry - 1) == 'tok'
    assert settings_repo.get_valid_drive_token(now_ms=expiry) is None
    settings_repo.clear_drive_token()
    assert settings_repo.get_valid_drive_token() is None


def test_push_tokens_are_deduplicated(settings_repo):
    assert settings_repo.add_push_token('t1') is True
    assert settings_repo.add_push_token('t1') is False
    assert settings_repo.get_push_tokens() == ['t1']


def test_concurrent_setting_writes_do_not_lose_updates(settings_repo):
    original_load = settings_repo.load
    paused, release = threading.Event(), threading.Event()
    calls = []

    def slow_load():
        data = original_load()
        if not calls:
            calls.append(1)
            paused.set()
            release.wait(1)
        return data

    settings_repo.load = slow_load
    first = threading.Thread(target=settings_repo.set_favorites, args=('clientA', ['1']))
    second = threading.Thread(target=settings_repo.set_favorites, args=('clientB', ['2']))

    first.start()
    assert paused.wait(1)
    second.start()
    second.join(timeout=0.2)
    assert second.is_alive()

    release.set()
    first.join()
    second.join()

    assert settings_repo.get_favorites('clientA') == ['1']
    assert settings_repo.get_favorites('clientB') == ['2']
