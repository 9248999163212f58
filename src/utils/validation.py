# input checks run by the screens before anything reaches a store
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Tuple

from store.models import (
    DeliveryItem,
    DocumentType,
    ProductStatus,
    QuotationItem,
    QuotationStatus,
    Role,
)
from utils.errors import ValidationError
from utils.pure import split_tags

MIN_UNIT_PRICE = Decimal("0.01")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _required(value: Optional[str], field: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required", field)
    return value


def _min_length(value: Optional[str], length: int, field: str, message: str) -> str:
    value = (value or "").strip()
    if len(value) < length:
        raise ValidationError(message, field)
    return value


def _decimal(value, field: str, label: str) -> Decimal:
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{label} must be a number", field) from None
    if not result.is_finite():
        raise ValidationError(f"{label} must be a number", field)
    return result


def _int(value, field: str, label: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"{label} must be a whole number", field) from None


def validate_client(
    name: str, surname: str, company: str, phone: str, email: str
) -> dict:
    """Return cleaned client fields, keyed like Client's constructor."""
    cleaned = {
        "name": _min_length(name, 2, "name", "Name must be at least 2 characters"),
        "surname": _min_length(
            surname, 2, "surname", "Surname must be at least 2 characters"
        ),
        "company": _required(company, "company", "Company"),
        "phone": _min_length(phone, 5, "phone", "Phone number is required"),
    }
    email = (email or "").strip()
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email address", "email")
    cleaned["email"] = email
    return cleaned


def validate_product(
    name: str,
    description: str,
    price,
    category: str,
    tags: str,
    stock,
    status,
    image_url: Optional[str] = None,
) -> dict:
    price = _decimal(price, "price", "Price")
    if price < 0:
        raise ValidationError("Price cannot be negative", "price")
    stock = _int(stock, "stock", "Stock")
    if stock < 0:
        raise ValidationError("Stock cannot be negative", "stock")
    try:
        status = ProductStatus(status)
    except ValueError:
        raise ValidationError("Unknown product status", "status") from None
    return {
        "name": _min_length(name, 2, "name", "Name must be at least 2 characters"),
        "description": _min_length(
            description, 10, "description", "Description must be at least 10 characters"
        ),
        "price": price,
        "category": _required(category, "category", "Category"),
        "tags": split_tags(tags) if isinstance(tags, str) else tuple(tags or ()),
        "stock": stock,
        "status": status,
        "image_url": (image_url or "").strip() or None,
    }


def validate_quotation_item(
    product_id: str, quantity, price, discount=None, index: int = 0
) -> QuotationItem:
    prefix = f"items.{index}"
    product_id = (product_id or "").strip()
    if not product_id:
        raise ValidationError("Product is required", f"{prefix}.product_id")
    quantity = _int(quantity, f"{prefix}.quantity", "Quantity")
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1", f"{prefix}.quantity")
    price = _decimal(price, f"{prefix}.price", "Price")
    if price < MIN_UNIT_PRICE:
        raise ValidationError("Price must be greater than 0", f"{prefix}.price")
    if discount is None or (isinstance(discount, str) and not discount.strip()):
        discount = None
    else:
        discount = _decimal(discount, f"{prefix}.discount", "Discount")
        if discount < 0 or discount > 100:
            raise ValidationError(
                "Discount must be between 0 and 100", f"{prefix}.discount"
            )
    return QuotationItem(product_id, quantity, price, discount)


def validate_quotation(
    client_id: str, items: Iterable[QuotationItem], status
) -> Tuple[str, Tuple[QuotationItem, ...], QuotationStatus]:
    client_id = (client_id or "").strip()
    if not client_id:
        raise ValidationError("Client is required", "client_id")
    items = tuple(items)
    if not items:
        raise ValidationError("At least one item is required", "items")
    try:
        status = QuotationStatus(status)
    except ValueError:
        raise ValidationError("Unknown quotation status", "status") from None
    return client_id, items, status


def validate_user(
    username: str, password: str, full_name: str, role, require_password: bool = True
) -> dict:
    username = (username or "").strip()
    if len(username) < 3:
        raise ValidationError("Username must be at least 3 characters", "username")
    password = password or ""
    if password or require_password:
        if len(password) < 6:
            raise ValidationError(
                "Password must be at least 6 characters", "password"
            )
    full_name = (full_name or "").strip()
    if len(full_name) < 2:
        raise ValidationError("Full name is required", "full_name")
    try:
        role = Role(role)
    except ValueError:
        raise ValidationError("Role is required", "role") from None
    return {
        "username": username,
        "password": password or None,
        "full_name": full_name,
        "role": role,
    }


def validate_sample_request(client_id: str, product_ids: Iterable[str]) -> List[str]:
    _required(client_id, "client_id", "Client")
    product_ids = [p for p in product_ids if p]
    if not product_ids:
        raise ValidationError("Please select at least one product", "product_ids")
    return product_ids


def validate_delivery_note(client_id: str, items: Iterable[DeliveryItem]) -> list:
    _required(client_id, "client_id", "Client")
    items = list(items)
    if not items:
        raise ValidationError("Please add at least one product", "items")
    for item in items:
        if item.quantity <= 0:
            raise ValidationError("Quantity must be greater than zero", "quantity")
    return items


def validate_document(product_id: str, filename: str, doc_type) -> dict:
    try:
        doc_type = DocumentType(doc_type)
    except ValueError:
        raise ValidationError("Unknown document type", "type") from None
    return {
        "product_id": _required(product_id, "product_id", "Product"),
        "filename": _required(filename, "filename", "Document name"),
        "type": doc_type,
    }
