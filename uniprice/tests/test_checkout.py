import threading

import pytest

from uniprice.errors import ValidationError
from uniprice.models.entities import CartItem, Customer
from uniprice.services.cart_service import CartService
from uniprice.services.checkout_service import CheckoutService
from uniprice.services.data_sources import LocalDataSource
from uniprice.services.mode_controller import ModeController
from uniprice.tests.fakes import make_product


CUSTOMER = {'name': 'Sana', 'phone': '0300-1234567', 'address': 'House 4, Block B', 'city': 'Lahore'}


@pytest.fixture
def cart():
    return CartService(storage={})


@pytest.fixture
def local_controller(state, settings_repo, snapshot_store):
    controller = ModeController(state, settings_repo, snapshot_store)
    controller.start()
    return controller


@pytest.fixture
def remote_controller(state, settings_repo, snapshot_store, gateway_factory):
    controller = ModeController(state, settings_repo, snapshot_store, gateway_factory)
    controller.start()
    return controller


def test_missing_field_is_rejected(cart, local_controller):
    checkout = CheckoutService(cart, local_controller)
    cart.add_to_cart(make_product('1'))

    result = checkout.place_order({**CUSTOMER, 'address': '   '})

    assert result['ok'] is False
    assert result['field'] == 'address'
    assert cart.count() == 1


def test_city_must_be_in_list(cart, local_controller):
    checkout = CheckoutService(cart, local_controller)
    with pytest.raises(ValidationError) as exc_info:
        checkout.validate_customer({**CUSTOMER, 'city': 'Quetta'})
    assert exc_info.value.field == 'city'
    assert checkout.default_city == 'Karachi'


def test_empty_cart_is_rejected(cart, local_controller):
    result = CheckoutService(cart, local_controller).place_order(CUSTOMER)
    assert result['ok'] is False
    assert 'field' not in result


def test_local_order_gets_local_id_and_clears_cart(cart, local_controller, snapshot_store, state):
    checkout = CheckoutService(cart, local_controller)
    cart.add_to_cart(make_product('1'))
    cart.add_to_cart(make_product('1'))
    cart.add_to_cart(make_product('2', price=250))

    result = checkout.place_order(CUSTOMER)

    assert result['ok'] is True
    order = result['order']
    assert order['id'].startswith('LOCAL-')
    assert order['total'] == 450
    assert order['customer']['city'] == 'Lahore'
    assert result['mensaje'] == 'Your goodies are on their way. Get Rs. 450 ready for Cash on Delivery!'
    assert cart.get_cart()['items'] == []
    assert [o.id for o in state.orders] == [order['id']]
    assert snapshot_store.load_orders()[0].id == order['id']


def test_remote_order_uses_document_id(cart, remote_controller, firestore_db):
    checkout = CheckoutService(cart, remote_controller)
    cart.add_to_cart(make_product('1'))

    result = checkout.place_order(CUSTOMER)

    assert result['ok'] is True
    assert result['order']['id'] in firestore_db.data['orders']
    assert cart.count() == 0


def test_failed_write_keeps_cart(cart, remote_controller, firestore_db):
    checkout = CheckoutService(cart, remote_controller)
    cart.add_to_cart(make_product('1'))
    firestore_db.writes_fail = True

    result = checkout.place_order(CUSTOMER)

    assert result['ok'] is False
    assert cart.count() == 1
    assert remote_controller.is_local is False


def test_non_object_customer_is_rejected(cart, local_controller):
    checkout = CheckoutService(cart, local_controller)
    cart.add_to_cart(make_product('1'))

    for data in ('Sana, Lahore', [CUSTOMER], 42):
        result = checkout.place_order(data)
        assert result['ok'] is False
        assert result['field'] == 'customer'
    assert checkout.place_order(None)['field'] == 'name'
    assert cart.count() == 1


def test_interleaved_local_orders_are_all_persisted(state, snapshot_store, monkeypatch):
    source = LocalDataSource(state, snapshot_store)
    original_save = snapshot_store.save_orders
    paused, release = threading.Event(), threading.Event()
    calls = []

    def slow_save(orders):
        if not calls:
            calls.append(1)
            paused.set()
            release.wait(1)
        original_save(orders)

    monkeypatch.setattr(snapshot_store, 'save_orders', slow_save)
    customer = Customer.from_dict(CUSTOMER)
    items = [CartItem.from_product(make_product('1'))]

    def place():
        source.create_order(customer, items, 100, 1)

    first = threading.Thread(target=place)
    second = threading.Thread(target=place)
    first.start()
    assert paused.wait(1)
    second.start()
    second.join(timeout=0.2)
    assert second.is_alive()

    release.set()
    first.join()
    second.join()

    persisted = [o.id for o in snapshot_store.load_orders()]
    assert len(persisted) == 2
    assert persisted == [o.id for o in state.orders]
