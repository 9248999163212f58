# initial data used when local storage holds nothing yet
from datetime import datetime
from decimal import Decimal
from typing import List

from store.models import (
    Client,
    Product,
    ProductStatus,
    Quotation,
    QuotationItem,
    QuotationStatus,
    Role,
    User,
)


def initial_users() -> List[User]:
    return [
        User("1", "admin", "admin123", Role.ADMIN, "Admin User", True),
        User("2", "sales1", "sales123", Role.SALES, "John Sales", True),
        User("3", "manager1", "manager123", Role.MANAGER, "Jane Manager", True),
    ]


def initial_clients() -> List[Client]:
    return [
        Client(
            "1", "John", "Doe", "ABC Corp", "+1234567890",
            "john.doe@example.com", datetime(2023, 1, 15),
        ),
        Client(
            "2", "Jane", "Smith", "XYZ Ltd", "+0987654321",
            "jane.smith@example.com", datetime(2023, 2, 20),
        ),
        Client(
            "3", "Robert", "Johnson", "Johnson & Co", "+1122334455",
            "robert@johnson.com", datetime(2023, 3, 10),
        ),
    ]


def initial_products() -> List[Product]:
    return [
        Product(
            id="1",
            name="Industrial Washing Machine",
            description="Heavy duty washing machine for commercial use",
            price=Decimal("2499.99"),
            category="Laundry",
            tags=("washing machine", "laundry", "cleaning", "industrial"),
            stock=12,
            status=ProductStatus.IN_STOCK,
            created_at=datetime(2023, 1, 5),
        ),
        Product(
            id="2",
            name="Commercial Vacuum Cleaner",
            description="Powerful vacuum for large spaces",
            price=Decimal("599.99"),
            category="Cleaning",
            tags=("vacuum", "cleaning", "floor care"),
            stock=0,
            status=ProductStatus.OUT_OF_STOCK,
            created_at=datetime(2023, 2, 10),
        ),
        Product(
            id="3",
            name="Detergent (Bulk)",
            description="20L professional cleaning detergent",
            price=Decimal("89.99"),
            category="Cleaning Supplies",
            tags=("detergent", "cleaning", "supplies", "liquid"),
            stock=45,
            status=ProductStatus.IN_STOCK,
            created_at=datetime(2023, 3, 15),
        ),
        Product(
            id="4",
            name="Dishwasher Pro",
            description="Commercial grade dishwasher",
            price=Decimal("1299.99"),
            category="Kitchen",
            tags=("dishwasher", "kitchen", "cleaning"),
            stock=0,
            status=ProductStatus.ON_COMMAND,
            created_at=datetime(2023, 1, 25),
        ),
    ]


def initial_quotations() -> List[Quotation]:
    return [
        Quotation(
            id="1",
            client_id="1",
            items=(
                QuotationItem("1", 2, Decimal("2499.99")),
                QuotationItem("3", 5, Decimal("89.99")),
            ),
            total=Decimal("5449.93"),
            status=QuotationStatus.SENT,
            created_by="1",
            created_at=datetime(2023, 4, 10),
            updated_at=datetime(2023, 4, 10),
        ),
        Quotation(
            id="2",
            client_id="2",
            items=(
                QuotationItem("2", 1, Decimal("599.99")),
                QuotationItem("3", 2, Decimal("89.99")),
            ),
            total=Decimal("779.97"),
            status=QuotationStatus.ACCEPTED,
            created_by="2",
            created_at=datetime(2023, 4, 15),
            updated_at=datetime(2023, 4, 17),
        ),
    ]
