"""Lookup tables for ingredient normalization, validation and deduplication.

All tables are built once at import time and never mutated. The pure functions
in this package take them as default arguments so tests (or callers with a
different catalogue) can pass their own.
"""

from types import MappingProxyType

# Ordered (pattern, replacement) rules. A rule fires when the cleaned string
# equals or contains the pattern; the first firing rule wins.
NORMALIZATION_RULES: tuple[tuple[str, str], ...] = (
    # Singular/plural unification
    ("tomato", "tomatoes"),
    ("onion", "onions"),
    ("carrot", "carrots"),
    ("apple", "apples"),
    ("orange", "oranges"),
    ("lemon", "lemons"),
    ("lime", "limes"),
    ("potato", "potatoes"),
    ("yams", "yam"),
    # Oil variants
    ("vegetable oil", "olive oil"),
    ("cooking oil", "olive oil"),
    ("cooking oils", "olive oil"),
    # Leafy greens
    ("leafy greens", "lettuce"),
    ("salad greens", "lettuce"),
    # Branded condiments kept specific
    ("a1", "a1 sauce"),
    ("hellmanns", "hellmanns mayo"),
    # Pepper variants
    ("bell pepper", "peppers"),
    ("green pepper", "peppers"),
    ("red pepper", "peppers"),
    # Cheese variants
    ("cheddar cheese", "cheese"),
    ("mozzarella cheese", "cheese"),
)

# Exact-match blocklist: categories, containers and vague descriptors.
BLOCKED_TERMS: frozenset[str] = frozenset(
    {
        # Categories
        "fruit", "fruits", "fresh produce", "vegetables", "veggies", "leafy greens",
        "condiments", "sauces", "dressings", "grains", "nuts", "herbs", "spices",
        "oils", "cereals", "legumes", "dairy", "produce", "meat", "seafood",
        "beverages", "drinks", "juice", "citrus fruits", "root vegetables",
        "oil", "seasonings", "cereal",
        # Containers and surroundings
        "bowls", "baskets", "container", "containers", "bottle", "jar", "package",
        "can", "box", "bag", "plastic", "glass", "metal", "wood", "kitchen",
        "fridge", "refrigerator", "shelf",
        # Vague descriptors
        "various", "some", "many", "several", "different", "other", "items", "food",
        "ingredients", "products", "goods", "brand", "label", "see", "visible",
        "appears",
    }
)

VEGAN_BLOCKED: tuple[str, ...] = (
    "milk", "cheese", "butter", "yogurt", "cream", "eggs", "honey",
    "meat", "chicken", "beef", "pork", "fish", "salmon", "tuna", "bacon",
)

VEGETARIAN_BLOCKED: tuple[str, ...] = (
    "meat", "chicken", "beef", "pork", "fish", "salmon", "tuna", "bacon", "ham", "turkey",
)

GLUTEN_BLOCKED: tuple[str, ...] = (
    "bread", "pasta", "flour", "wheat", "barley", "rye", "soy sauce",
)

# Restriction keyword -> substrings that disqualify an ingredient.
DIETARY_EXCLUSIONS = MappingProxyType(
    {
        "vegan": VEGAN_BLOCKED,
        "vegetarian": VEGETARIAN_BLOCKED,
        "gluten-free": GLUTEN_BLOCKED,
    }
)

# Members of a group count as the same ingredient during deduplication.
EQUIVALENCE_GROUPS: tuple[frozenset[str], ...] = (
    frozenset({"lemon", "lemons"}),
    frozenset({"lime", "limes"}),
    frozenset({"fruit", "fruits"}),
    frozenset({"oil", "oils", "olive oil"}),
    frozenset({"milk", "milk."}),
    frozenset({"juice", "juices"}),
)

# Always assumed to be in the pantry after image analysis.
ASSUMED_STAPLES: tuple[str, ...] = ("salt", "pepper", "olive oil", "water")
