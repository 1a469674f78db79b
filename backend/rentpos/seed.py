# Overview: Default catalog and employees for a fresh store (idempotent).

from __future__ import annotations

from decimal import Decimal

from .extensions import db
from .models import Employee, Product, RentalProduct
from .models.employees import POSITION_ADMIN, POSITION_CASHIER
from .services import employee_service

# (id, name, price, stock, category)
DEFAULT_PRODUCTS = [
    ("1000", "Potato", "1.00", 249, "grocery"),
    ("1001", "Plastic Cup", "0.50", 376, "grocery"),
    ("1002", "Tomato", "1.50", 180, "grocery"),
    ("1003", "Onion", "0.80", 220, "grocery"),
    ("1004", "Carrot", "1.20", 150, "grocery"),
    ("1005", "Bread", "2.50", 95, "grocery"),
    ("1006", "Milk (1L)", "3.99", 120, "grocery"),
    ("1007", "Eggs (12)", "4.50", 85, "grocery"),
    ("1008", "Cheese", "5.99", 60, "grocery"),
    ("1009", "Butter", "4.25", 75, "grocery"),
    ("2000", "USB Cable", "9.99", 150, "electronics"),
    ("2001", "Phone Charger", "15.99", 100, "electronics"),
    ("2002", "Headphones", "29.99", 45, "electronics"),
    ("2003", "Mouse", "19.99", 80, "electronics"),
    ("2004", "Keyboard", "39.99", 55, "electronics"),
    ("3000", "T-Shirt", "12.99", 200, "clothing"),
    ("3001", "Jeans", "39.99", 120, "clothing"),
    ("3002", "Socks (3-pack)", "8.99", 180, "clothing"),
]

DEFAULT_RENTAL_PRODUCTS = [
    ("1000", "Theory Of Everything", "30.00", 249, "movie"),
    ("1001", "Adventures Of Tom Sawyer", "40.50", 391, "book"),
    ("1002", "Interstellar", "35.00", 180, "movie"),
    ("1003", "The Martian", "32.00", 150, "movie"),
    ("1004", "Harry Potter Complete Set", "55.00", 85, "book"),
    ("1005", "Lord of the Rings Trilogy", "50.00", 95, "book"),
    ("1006", "Inception", "33.00", 120, "movie"),
    ("1007", "The Great Gatsby", "25.00", 200, "book"),
    ("1008", "Camera Equipment", "75.00", 25, "equipment"),
    ("1009", "Projector", "85.00", 15, "equipment"),
    ("1010", "Gaming Console", "65.00", 40, "equipment"),
]

# Default password meets the strength rule; change it after first login
DEFAULT_PASSWORD = "Password123!"

# (username, name, position)
DEFAULT_EMPLOYEES = [
    ("harry_admin", "Harry Larry", POSITION_ADMIN),
    ("debra_cashier", "Debra Cooper", POSITION_CASHIER),
]


def seed_catalog() -> tuple[int, int]:
    """Insert missing default products and rental products. Returns (products, rentals) created."""
    created_products = 0
    for product_id, name, price, stock, category in DEFAULT_PRODUCTS:
        if db.session.get(Product, product_id) is None:
            db.session.add(Product(id=product_id, name=name, price=Decimal(price), stock=stock, category=category))
            created_products += 1

    created_rentals = 0
    for product_id, name, price, stock, category in DEFAULT_RENTAL_PRODUCTS:
        if db.session.get(RentalProduct, product_id) is None:
            db.session.add(RentalProduct(
                id=product_id, name=name, rental_price=Decimal(price), stock=stock, category=category,
            ))
            created_rentals += 1

    db.session.commit()
    return created_products, created_rentals


def seed_employees(password: str = DEFAULT_PASSWORD) -> list[Employee]:
    """Create the default employees that do not exist yet."""
    created = []
    for username, name, position in DEFAULT_EMPLOYEES:
        if db.session.query(Employee).filter_by(username=username).first():
            continue
        created.append(employee_service.create_employee(username, name, password, position))
    return created
