"""Creates the data directory and seeds a few catalog products."""
from app.config import settings
from app.database import FileBackedDB


SAMPLE_PRODUCTS = [
    {"name": "Salmon Dry Cat Food 2kg", "category": "cat-food", "price": 24.5, "discount": 10},
    {"name": "Chew Rope Toy", "category": "dog-toys", "price": 6.99, "discount": 0},
    {"name": "Oatmeal Pet Shampoo", "category": "grooming", "price": 12.0, "discount": 15},
]


settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
products = FileBackedDB(settings.DATA_DIR).collection("products")

if not products.find():
    for product in SAMPLE_PRODUCTS:
        products.insert_one(dict(product))
    print(f"Seeded {len(SAMPLE_PRODUCTS)} products into {settings.DATA_DIR}")
else:
    print('products already seeded')
