# ==============================================================================
# CATÁLOGO SEMILLA
# ==============================================================================
# Se muestra cuando no hay snapshot local o cuando la colección remota
# de productos está vacía. Nunca se escribe de vuelta a Firestore.
# ==============================================================================

from typing import List

from uniprice.models.entities import Category, Product


_SEED = [
    ('1', 'Crunchy Corn Chips', Category.SNACKS, 'snack1', 'Savory and spicy corn chips.'),
    ('2', 'Neon Gel Pens (3pk)', Category.STATIONERY, 'pen1', 'Smooth writing in vibrant colors.'),
    ('3', 'Ceramic Mini Planter', Category.HOUSEWARE, 'house1', 'Perfect for small succulents.'),
    ('4', 'USB LED Light', Category.GADGETS, 'gadget1', 'Brighten your workspace anywhere.'),
    ('5', 'Charcoal Face Mask', Category.SELF_CARE, 'care1', 'Deep cleaning for glowing skin.'),
    ('6', 'Sour Gummy Worms', Category.SNACKS, 'snack2', 'Tangy and chewy treats.'),
    ('7', 'Washi Tape Set', Category.STATIONERY, 'stationery2', 'Decorative tapes for journaling.'),
    ('8', 'Microfiber Cloth', Category.HOUSEWARE, 'house2', 'Ultra-absorbent cleaning cloth.'),
    ('9', 'Phone Kickstand', Category.GADGETS, 'gadget2', 'Sturdy support for all smartphones.'),
    ('10', 'Scented Candle', Category.SELF_CARE, 'care2', 'Lavender scent for relaxation.'),
    ('11', 'Roasted Almonds', Category.SNACKS, 'snack3', 'Nutritious and lightly salted.'),
    ('12', 'Memo Pad Cube', Category.STATIONERY, 'stationery3', 'Colorful squares for quick notes.'),
]


def seed_products() -> List[Product]:
    """Retorna una copia nueva del catálogo semilla."""
    return [
        Product(
            id=pid,
            name=name,
            price=100,
            category=category,
            image=f'https://picsum.photos/seed/{seed}/400/300',
            description=description,
        )
        for pid, name, category, seed, description in _SEED
    ]
