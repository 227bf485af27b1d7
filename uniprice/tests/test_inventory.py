import json

import pytest

from uniprice.models.entities import StoreConfig
from uniprice.services.inventory_service import InventoryService, parse_import_rows
from uniprice.services.mode_controller import ModeController


@pytest.fixture
def local_inventory(state, settings_repo, snapshot_store):
    controller = ModeController(state, settings_repo, snapshot_store)
    controller.start()
    return InventoryService(state, controller)


@pytest.fixture
def remote_inventory(state, settings_repo, snapshot_store, gateway_factory):
    controller = ModeController(state, settings_repo, snapshot_store, gateway_factory)
    controller.start()
    return InventoryService(state, controller)


PRODUCT = {
    'name': 'Glitter Pens',
    'category': 'Stationery',
    'image': 'https://img.example/pens.jpg',
    'description': 'Set of 6',
    'price': 9999,
}


def test_new_product_takes_global_price(local_inventory, state):
    state.replace_config(StoreConfig(item_price=120))

    result = local_inventory.create_product(PRODUCT)

    assert result['ok']
    assert result['product']['price'] == 120
    assert state.products[0].name == 'Glitter Pens'


def test_name_and_image_are_required(local_inventory):
    assert local_inventory.create_product({**PRODUCT, 'name': ''})['field'] == 'name'
    assert local_inventory.create_product({**PRODUCT, 'image': ''})['field'] == 'image'


def test_drive_links_are_normalized(local_inventory):
    result = local_inventory.create_product({
        **PRODUCT, 'image': 'https://drive.google.com/uc?export=view&id=AbC-123_x',
    })
    assert result['product']['image'] == 'https://lh3.googleusercontent.com/d/AbC-123_x'


def test_update_and_delete(local_inventory, snapshot_store):
    created = local_inventory.create_product(PRODUCT)['product']

    result = local_inventory.update_product(created['id'], {**PRODUCT, 'name': 'Gel Pens'})
    assert result['ok']
    assert snapshot_store.load_products()[0].name == 'Gel Pens'

    assert local_inventory.delete_product(created['id'])['ok']
    assert local_inventory.delete_product(created['id'])['not_found'] is True
    assert local_inventory.update_product('missing', PRODUCT)['not_found'] is True


def test_update_config_validates(local_inventory, state):
    assert local_inventory.update_config({'bundleItemCount': 0})['ok'] is False
    assert local_inventory.update_config({'itemPrice': 'abc'})['ok'] is False

    result = local_inventory.update_config({'itemPrice': '80'})
    assert result['ok']
    assert result['config'] == {'itemPrice': 80, 'bundleItemCount': 6, 'bundlePrice': 432}
    assert state.config == StoreConfig(80, 6)


def test_remote_create_writes_to_firestore(remote_inventory, firestore_db, state):
    result = remote_inventory.create_product(PRODUCT)

    assert result['ok']
    assert result['product']['id'] in firestore_db.data['products']
    assert [p.name for p in state.products] == ['Glitter Pens']


def test_remote_write_failure_is_reported(remote_inventory, firestore_db):
    firestore_db.writes_fail = True
    result = remote_inventory.create_product(PRODUCT)
    assert result['ok'] is False
    assert 'field' not in result


def test_clear_orders_local_vs_remote(local_inventory, remote_inventory):
    assert local_inventory.clear_orders() == {'ok': True, 'local': True}
    assert remote_inventory.clear_orders() == {'ok': True, 'local': False}


# =========================================================================
# Importación masiva
# =========================================================================

def test_csv_import_counts_skipped_rows(local_inventory, state):
    content = (
        '\ufeffName,Category,Image,Description\n'
        'Mug,Houseware,https://img.example/mug.jpg,Ceramic\n'
        ',Snacks,https://img.example/x.jpg,No name\n'
        'Lip Balm,Self-Care,,No image\n'
        'Cable,Gadgets,https://img.example/cable.jpg,USB-C\n'
    )

    result = local_inventory.bulk_import(content, 'products.csv')

    assert result == {'ok': True, 'imported': 2, 'skipped': 2, 'failed': 0}
    names = [p.name for p in state.products]
    assert 'Mug' in names and 'Cable' in names


def test_json_import(local_inventory):
    content = json.dumps([
        {'name': 'Chips', 'image': 'https://img.example/c.jpg', 'category': 'Snacks'},
        {'name': 'No image'},
    ])
    result = local_inventory.bulk_import(content, 'upload.json')
    assert result['imported'] == 1
    assert result['skipped'] == 1


def test_import_rejects_bad_content(local_inventory):
    assert local_inventory.bulk_import('', 'x.csv')['ok'] is False
    assert local_inventory.bulk_import('{"name": "x"}', 'x.json')['ok'] is False
    with pytest.raises(ValueError):
        parse_import_rows('[not json', 'x.json')
