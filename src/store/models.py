# provide dataclass models, update requests and JSON record conversion
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ProductStatus(str, Enum):
    IN_STOCK = "in-stock"
    OUT_OF_STOCK = "out-of-stock"
    ON_COMMAND = "on-command"


class QuotationStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class RequestStatus(str, Enum):
    """Lifecycle shared by sample requests and delivery notes."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    DELIVERED = "delivered"


class Role(str, Enum):
    ADMIN = "admin"
    SALES = "sales"
    MANAGER = "manager"


class DocumentType(str, Enum):
    TDS = "TDS"  # technical data sheet
    SDS = "SDS"  # safety data sheet


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    surname: str
    company: str
    phone: str
    email: str
    created_at: datetime

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    price: Decimal
    category: str
    tags: Tuple[str, ...]
    stock: int
    status: ProductStatus
    created_at: datetime
    image_url: Optional[str] = None


@dataclass(frozen=True)
class QuotationItem:
    product_id: str
    quantity: int
    price: Decimal  # unit price captured when the quotation was written
    discount: Optional[Decimal] = None  # percent, 0..100


@dataclass(frozen=True)
class Quotation:
    id: str
    client_id: str
    items: Tuple[QuotationItem, ...]
    total: Decimal  # pre-VAT subtotal, written by the caller
    status: QuotationStatus
    created_by: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class User:
    id: str
    username: str
    password: str
    role: Role
    full_name: str
    active: bool = True


@dataclass(frozen=True)
class SampleRequest:
    id: str
    client_id: str
    product_ids: Tuple[str, ...]
    notes: str
    status: RequestStatus
    requested_by: str
    requested_at: datetime
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None


@dataclass(frozen=True)
class DeliveryItem:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class DeliveryNote:
    id: str
    client_id: str
    items: Tuple[DeliveryItem, ...]
    notes: str
    status: RequestStatus
    requested_by: str
    requested_at: datetime
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None


@dataclass(frozen=True)
class DocumentFile:
    id: str
    product_id: str
    type: DocumentType
    filename: str
    uploaded_at: datetime
    file_url: str = "#"


@dataclass(frozen=True)
class DashboardStats:
    total_quotations: int
    total_clients: int
    total_products: int
    conversion_rate: int  # percent of sent/accepted/declined that were accepted
    status_counts: Dict[QuotationStatus, int] = field(default_factory=dict)
    recent_quotations: Tuple[Quotation, ...] = ()


# ---------------------------
# Update requests (None = keep current value)
# ---------------------------


@dataclass(frozen=True)
class ClientUpdate:
    name: Optional[str] = None
    surname: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class ProductUpdate:
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None
    stock: Optional[int] = None
    status: Optional[ProductStatus] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class QuotationUpdate:
    client_id: Optional[str] = None
    items: Optional[Tuple[QuotationItem, ...]] = None
    total: Optional[Decimal] = None
    status: Optional[QuotationStatus] = None


@dataclass(frozen=True)
class UserUpdate:
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    full_name: Optional[str] = None
    active: Optional[bool] = None


def changes(update) -> Dict[str, Any]:
    """Fields of an update request that were actually provided."""
    return {k: v for k, v in vars(update).items() if v is not None}


# ---------------------------
# JSON records
# ---------------------------
# Records keep the camelCase shape of the stored collections. There is no
# migration: a record in another shape raises KeyError on load.


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _dec(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


def _parse_dec(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def client_to_record(c: Client) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "surname": c.surname,
        "company": c.company,
        "phone": c.phone,
        "email": c.email,
        "createdAt": _ts(c.created_at),
    }


def client_from_record(r: dict) -> Client:
    return Client(
        id=r["id"],
        name=r["name"],
        surname=r["surname"],
        company=r["company"],
        phone=r["phone"],
        email=r["email"],
        created_at=_parse_ts(r["createdAt"]),
    )


def product_to_record(p: Product) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "price": _dec(p.price),
        "category": p.category,
        "tags": list(p.tags),
        "stock": p.stock,
        "status": p.status.value,
        "imageUrl": p.image_url,
        "createdAt": _ts(p.created_at),
    }


def product_from_record(r: dict) -> Product:
    return Product(
        id=r["id"],
        name=r["name"],
        description=r["description"],
        price=_parse_dec(r["price"]),
        category=r["category"],
        tags=tuple(r["tags"]),
        stock=int(r["stock"]),
        status=ProductStatus(r["status"]),
        image_url=r.get("imageUrl"),
        created_at=_parse_ts(r["createdAt"]),
    )


def quotation_to_record(q: Quotation) -> dict:
    return {
        "id": q.id,
        "clientId": q.client_id,
        "items": [
            {
                "productId": i.product_id,
                "quantity": i.quantity,
                "price": _dec(i.price),
                "discount": _dec(i.discount),
            }
            for i in q.items
        ],
        "total": _dec(q.total),
        "status": q.status.value,
        "createdBy": q.created_by,
        "createdAt": _ts(q.created_at),
        "updatedAt": _ts(q.updated_at),
    }


def quotation_from_record(r: dict) -> Quotation:
    return Quotation(
        id=r["id"],
        client_id=r["clientId"],
        items=tuple(
            QuotationItem(
                product_id=i["productId"],
                quantity=int(i["quantity"]),
                price=_parse_dec(i["price"]),
                discount=_parse_dec(i.get("discount")),
            )
            for i in r["items"]
        ),
        total=_parse_dec(r["total"]),
        status=QuotationStatus(r["status"]),
        created_by=r["createdBy"],
        created_at=_parse_ts(r["createdAt"]),
        updated_at=_parse_ts(r["updatedAt"]),
    )


def user_to_record(u: User) -> dict:
    return {
        "id": u.id,
        "username": u.username,
        "password": u.password,
        "role": u.role.value,
        "fullName": u.full_name,
        "active": u.active,
    }


def user_from_record(r: dict) -> User:
    return User(
        id=r["id"],
        username=r["username"],
        password=r["password"],
        role=Role(r["role"]),
        full_name=r["fullName"],
        active=bool(r["active"]),
    )


def sample_request_to_record(s: SampleRequest) -> dict:
    return {
        "id": s.id,
        "clientId": s.client_id,
        "productIds": list(s.product_ids),
        "notes": s.notes,
        "status": s.status.value,
        "requestedBy": s.requested_by,
        "requestedAt": _ts(s.requested_at),
        "approvedBy": s.approved_by,
        "approvedAt": _ts(s.approved_at),
    }


def sample_request_from_record(r: dict) -> SampleRequest:
    return SampleRequest(
        id=r["id"],
        client_id=r["clientId"],
        product_ids=tuple(r["productIds"]),
        notes=r["notes"],
        status=RequestStatus(r["status"]),
        requested_by=r["requestedBy"],
        requested_at=_parse_ts(r["requestedAt"]),
        approved_by=r.get("approvedBy"),
        approved_at=_parse_ts(r.get("approvedAt")),
    )


def delivery_note_to_record(d: DeliveryNote) -> dict:
    return {
        "id": d.id,
        "clientId": d.client_id,
        "items": [{"productId": i.product_id, "quantity": i.quantity} for i in d.items],
        "notes": d.notes,
        "status": d.status.value,
        "requestedBy": d.requested_by,
        "requestedAt": _ts(d.requested_at),
        "approvedBy": d.approved_by,
        "approvedAt": _ts(d.approved_at),
    }


def delivery_note_from_record(r: dict) -> DeliveryNote:
    return DeliveryNote(
        id=r["id"],
        client_id=r["clientId"],
        items=tuple(
            DeliveryItem(product_id=i["productId"], quantity=int(i["quantity"]))
            for i in r["items"]
        ),
        notes=r["notes"],
        status=RequestStatus(r["status"]),
        requested_by=r["requestedBy"],
        requested_at=_parse_ts(r["requestedAt"]),
        approved_by=r.get("approvedBy"),
        approved_at=_parse_ts(r.get("approvedAt")),
    )


def document_to_record(d: DocumentFile) -> dict:
    return {
        "id": d.id,
        "productId": d.product_id,
        "type": d.type.value,
        "filename": d.filename,
        "fileUrl": d.file_url,
        "uploadedAt": _ts(d.uploaded_at),
    }


def document_from_record(r: dict) -> DocumentFile:
    return DocumentFile(
        id=r["id"],
        product_id=r["productId"],
        type=DocumentType(r["type"]),
        filename=r["filename"],
        file_url=r.get("fileUrl", "#"),
        uploaded_at=_parse_ts(r["uploadedAt"]),
    )
