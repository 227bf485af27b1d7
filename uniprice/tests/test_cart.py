import pytest

from uniprice.services.cart_service import CartService
from uniprice.tests.fakes import make_product


@pytest.fixture
def cart():
    return CartService(storage={})


def test_repeated_add_keeps_a_single_line(cart):
    product = make_product('1')
    for _ in range(5):
        cart.add_to_cart(product)

    lines = cart.lines()
    assert len(lines) == 1
    assert lines[0].quantity == 5


def test_totals_and_decrement_to_zero_removes_line(cart):
    a, b = make_product('A'), make_product('B')
    cart.add_to_cart(a)
    cart.add_to_cart(a)
    cart.add_to_cart(b)

    assert cart.total() == 300
    assert cart.count() == 3

    cart.decrement('A')
    cart.decrement('A')

    lines = cart.lines()
    assert [(l.id, l.quantity) for l in lines] == [('B', 1)]


def test_increment_and_set_quantity(cart):
    cart.add_to_cart(make_product('1'))
    cart.increment('1')
    assert cart.count() == 2

    cart.set_quantity('1', 7)
    assert cart.get_cart()['total'] == 700

    cart.set_quantity('1', 0)
    assert cart.lines() == []


def test_unknown_line_and_invalid_quantity(cart):
    assert cart.increment('nope')['ok'] is False
    assert cart.decrement('nope')['ok'] is False
    cart.add_to_cart(make_product('1'))
    assert cart.set_quantity('1', 'many')['ok'] is False
    assert cart.add_to_cart(None)['ok'] is False


def test_clear(cart):
    cart.add_to_cart(make_product('1'))
    cart.clear()
    assert cart.get_cart() == {'items': [], 'total': 0, 'count': 0}


def test_session_line_is_lean_and_hydrated_from_catalog(state):
    storage = {}
    product = make_product('1', name='Chips')
    state.replace_products([product])
    cart = CartService(state, storage=storage)

    cart.add_to_cart(product)

    assert storage['cart'] == [{'id': '1', 'name': 'Chips', 'price': 100, 'quantity': 1}]
    line = cart.lines()[0]
    assert line.image == 'https://img.example/1.jpg'
    assert line.category == 'Snacks'


def test_line_survives_product_deletion(state):
    product = make_product('1', name='Chips')
    state.replace_products([product])
    cart = CartService(state, storage={})
    cart.add_to_cart(product)

    state.remove_product('1')

    line = cart.lines()[0]
    assert (line.name, line.price, line.quantity) == ('Chips', 100, 1)
