"""Utility to pull item type and color out of catalog product names."""

import re


# Marketing words that say nothing about how the item looks
NOISE_PHRASES = [
    r'\bnew arrival\b',
    r'\bbest seller\b',
    r'\blimited edition\b',
    r'\bexclusive\b',
    r'\bpremium\b',
    r'\bclassic\b',
    r'\bluxury\b',
    r'\belegant\b',
    r'\bcollection\b',
    r'\bsku:?\s*\w+',
    r'\bitem\s*#?\s*\d+',
]

# Longest match first so "denim jacket" wins over "jacket"
CLOTHING_TYPES = [
    'maxi dress', 'midi dress', 'mini dress', 'slip dress', 'wrap dress',
    'denim jacket', 'leather jacket', 'polo shirt', 't-shirt', 'tank top',
    'dress', 'blouse', 'top', 'shirt', 'tee', 'camisole',
    'pants', 'trousers', 'jeans', 'shorts', 'skirt',
    'jacket', 'blazer', 'coat', 'cardigan', 'sweater', 'jumper', 'hoodie',
    'romper', 'jumpsuit',
]

ACCESSORY_TYPES = [
    'smartwatch', 'watch', 'crossbody bag', 'handbag', 'bag', 'necklace',
    'sunglasses', 'glasses', 'belt', 'baseball cap', 'cap', 'hat',
    'earrings', 'scarf', 'ring', 'bracelet',
]

COLORS = [
    'rose gold', 'navy blue', 'dusty pink', 'powder pink',
    'black', 'white', 'navy', 'blue', 'red', 'pink', 'green', 'olive',
    'khaki', 'beige', 'cream', 'ivory', 'grey', 'gray', 'burgundy',
    'maroon', 'purple', 'lavender', 'turquoise', 'coral', 'orange',
    'yellow', 'gold', 'silver', 'brown', 'tan', 'camel', 'pearl',
]

MATERIALS = [
    'leather', 'denim', 'silk', 'satin', 'cotton', 'linen', 'wool',
    'cashmere', 'velvet', 'lace', 'diamond', 'pearl',
]


def clean_product_name(name: str) -> dict:
    """Clean a product name for use in prompts.

    Returns:
        dict with 'item_type', 'is_accessory', 'color', 'materials' and 'clean_name'
    """
    if not name or not name.strip():
        return {
            'item_type': 'clothing item',
            'is_accessory': False,
            'color': None,
            'materials': [],
            'clean_name': '',
        }

    text = name.lower()
    for pattern in NOISE_PHRASES:
        text = re.sub(pattern, '', text, flags=re.IGNORECASE)
    text = re.sub(r'\s+', ' ', text).strip()

    item_type = None
    is_accessory = False
    for it in CLOTHING_TYPES:
        if re.search(rf'\b{re.escape(it)}\b', text):
            item_type = it
            break
    if item_type is None:
        for it in ACCESSORY_TYPES:
            if re.search(rf'\b{re.escape(it)}\b', text):
                item_type = it
                is_accessory = True
                break

    color = None
    for c in COLORS:
        if re.search(rf'\b{re.escape(c)}\b', text):
            color = c
            break

    materials = [m for m in MATERIALS if re.search(rf'\b{m}\b', text) and m != color]

    return {
        'item_type': item_type or 'clothing item',
        'is_accessory': is_accessory,
        'color': color,
        'materials': materials[:2],
        'clean_name': text,
    }
