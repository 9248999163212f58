# in-memory domain collections, mirrored into local storage
from __future__ import annotations

import dataclasses
import time
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from store import seed
from store.models import (
    Client,
    ClientUpdate,
    DashboardStats,
    DeliveryItem,
    DeliveryNote,
    DocumentFile,
    DocumentType,
    Product,
    ProductUpdate,
    Quotation,
    QuotationItem,
    QuotationStatus,
    QuotationUpdate,
    RequestStatus,
    SampleRequest,
    changes,
    client_from_record,
    client_to_record,
    delivery_note_from_record,
    delivery_note_to_record,
    document_from_record,
    document_to_record,
    product_from_record,
    product_to_record,
    quotation_from_record,
    quotation_to_record,
    sample_request_from_record,
    sample_request_to_record,
)
from store.storage import LocalStorage
from utils.errors import InvalidTransitionError
from utils.logger import get_logger
from utils.pure import matches_text

_logger = get_logger(__name__)

UNKNOWN_CLIENT = "Unknown Client"
UNKNOWN_PRODUCT = "Unknown Product"
RECENT_QUOTATIONS = 5

# target status -> statuses it may be reached from
_TRANSITIONS = {
    RequestStatus.APPROVED: {RequestStatus.PENDING},
    RequestStatus.REJECTED: {RequestStatus.PENDING},
    RequestStatus.DELIVERED: {RequestStatus.APPROVED},
}

# collection attribute -> (storage key, to_record, from_record)
_COLLECTIONS = {
    "_clients": ("clients", client_to_record, client_from_record),
    "_products": ("products", product_to_record, product_from_record),
    "_quotations": ("quotations", quotation_to_record, quotation_from_record),
    "_sample_requests": (
        "sampleRequests",
        sample_request_to_record,
        sample_request_from_record,
    ),
    "_delivery_notes": (
        "deliveryNotes",
        delivery_note_to_record,
        delivery_note_from_record,
    ),
    "_documents": ("documents", document_to_record, document_from_record),
}


# delivery notes get a printable PDF only once approved
PRINTABLE_NOTE_STATUSES = (RequestStatus.APPROVED, RequestStatus.DELIVERED)


def can_print_delivery_note(note: DeliveryNote) -> bool:
    return note.status in PRINTABLE_NOTE_STATUSES


def merge_delivery_item(
    items: Sequence[DeliveryItem], product_id: str, quantity: int
) -> List[DeliveryItem]:
    """Add a product to a delivery draft, summing quantities for repeats."""
    merged: List[DeliveryItem] = []
    found = False
    for item in items:
        if item.product_id == product_id:
            item = DeliveryItem(product_id, item.quantity + quantity)
            found = True
        merged.append(item)
    if not found:
        merged.append(DeliveryItem(product_id, quantity))
    return merged


class DataStore:
    """
    Owns clients, products, quotations, sample requests, delivery notes
    and documents.

    Mutations replace the affected list in one assignment, then write that
    collection to storage when one is attached. Deletes never cascade, so
    readers must tolerate ids that point nowhere (see client_label and
    product_name).
    """

    def __init__(
        self,
        storage: Optional[LocalStorage] = None,
        with_seed: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._last_id = 0
        self._clients: List[Client] = seed.initial_clients() if with_seed else []
        self._products: List[Product] = seed.initial_products() if with_seed else []
        self._quotations: List[Quotation] = (
            seed.initial_quotations() if with_seed else []
        )
        self._sample_requests: List[SampleRequest] = []
        self._delivery_notes: List[DeliveryNote] = []
        self._documents: List[DocumentFile] = []

    # ---------------------------
    # Persistence
    # ---------------------------

    async def load(self) -> None:
        """Replace in-memory collections with what storage holds, if anything."""
        if self._storage is None:
            return
        for attr, (key, _, from_record) in _COLLECTIONS.items():
            records = await self._storage.get_item(key)
            if records is None:
                continue
            setattr(self, attr, [from_record(r) for r in records])
        _logger.info(
            f"Loaded {len(self._clients)} clients, {len(self._products)} products, "
            f"{len(self._quotations)} quotations"
        )

    async def _save(self, attr: str) -> None:
        if self._storage is None:
            return
        key, to_record, _ = _COLLECTIONS[attr]
        await self._storage.set_item(key, [to_record(r) for r in getattr(self, attr)])

    def _new_id(self) -> str:
        """Millisecond timestamp, bumped so two calls never return the same id."""
        candidate = max(int(time.time() * 1000), self._last_id + 1)
        self._last_id = candidate
        return str(candidate)

    # ---------------------------
    # Read access
    # ---------------------------

    @property
    def clients(self) -> List[Client]:
        return list(self._clients)

    @property
    def products(self) -> List[Product]:
        return list(self._products)

    @property
    def quotations(self) -> List[Quotation]:
        return list(self._quotations)

    @property
    def sample_requests(self) -> List[SampleRequest]:
        return list(self._sample_requests)

    @property
    def delivery_notes(self) -> List[DeliveryNote]:
        return list(self._delivery_notes)

    @property
    def documents(self) -> List[DocumentFile]:
        return list(self._documents)

    @staticmethod
    def _find(records: Iterable, record_id: str):
        return next((r for r in records if r.id == record_id), None)

    def get_client(self, client_id: str) -> Optional[Client]:
        return self._find(self._clients, client_id)

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._find(self._products, product_id)

    def get_quotation(self, quotation_id: str) -> Optional[Quotation]:
        return self._find(self._quotations, quotation_id)

    def get_sample_request(self, request_id: str) -> Optional[SampleRequest]:
        return self._find(self._sample_requests, request_id)

    def get_delivery_note(self, note_id: str) -> Optional[DeliveryNote]:
        return self._find(self._delivery_notes, note_id)

    def client_label(self, client_id: str) -> str:
        client = self.get_client(client_id)
        return client.full_name if client else UNKNOWN_CLIENT

    def product_name(self, product_id: str) -> str:
        product = self.get_product(product_id)
        return product.name if product else UNKNOWN_PRODUCT

    # ---------------------------
    # Clients
    # ---------------------------

    async def add_client(
        self, name: str, surname: str, company: str, phone: str, email: str
    ) -> Client:
        client = Client(
            id=self._new_id(),
            name=name,
            surname=surname,
            company=company,
            phone=phone,
            email=email,
            created_at=self._clock(),
        )
        self._clients = [*self._clients, client]
        await self._save("_clients")
        _logger.info(f"Client {client.id} added ({client.full_name})")
        return client

    async def update_client(self, client_id: str, update: ClientUpdate) -> Optional[Client]:
        """Apply the provided fields. Returns the new client, or None if unknown."""
        current = self.get_client(client_id)
        if current is None:
            return None
        updated = dataclasses.replace(current, **changes(update))
        self._clients = [updated if c.id == client_id else c for c in self._clients]
        await self._save("_clients")
        _logger.info(f"Client {client_id} updated")
        return updated

    async def delete_client(self, client_id: str) -> bool:
        """Remove the client. Quotations and requests that reference it are kept."""
        remaining = [c for c in self._clients if c.id != client_id]
        removed = len(remaining) != len(self._clients)
        self._clients = remaining
        await self._save("_clients")
        if removed:
            _logger.info(f"Client {client_id} deleted")
        return removed

    def search_clients(self, query: str) -> List[Client]:
        return [
            c
            for c in self._clients
            if matches_text(query, c.name, c.surname, c.company, c.email, c.phone)
        ]

    # ---------------------------
    # Products
    # ---------------------------

    async def add_product(
        self,
        name: str,
        description: str,
        price,
        category: str,
        tags: Iterable[str],
        stock: int,
        status,
        image_url: Optional[str] = None,
    ) -> Product:
        product = Product(
            id=self._new_id(),
            name=name,
            description=description,
            price=price,
            category=category,
            tags=tuple(t.lower() for t in tags),
            stock=stock,
            status=status,
            image_url=image_url or None,
            created_at=self._clock(),
        )
        self._products = [*self._products, product]
        await self._save("_products")
        _logger.info(f"Product {product.id} added ({product.name})")
        return product

    async def update_product(
        self, product_id: str, update: ProductUpdate
    ) -> Optional[Product]:
        """
        Apply the provided fields. Stock and status are independent: changing
        one never touches the other. An empty image_url clears the image.
        """
        current = self.get_product(product_id)
        if current is None:
            return None
        fields = changes(update)
        if "tags" in fields:
            fields["tags"] = tuple(t.lower() for t in fields["tags"])
        if fields.get("image_url") == "":
            fields["image_url"] = None
        updated = dataclasses.replace(current, **fields)
        self._products = [updated if p.id == product_id else p for p in self._products]
        await self._save("_products")
        _logger.info(f"Product {product_id} updated")
        return updated

    async def delete_product(self, product_id: str) -> bool:
        remaining = [p for p in self._products if p.id != product_id]
        removed = len(remaining) != len(self._products)
        self._products = remaining
        await self._save("_products")
        if removed:
            _logger.info(f"Product {product_id} deleted")
        return removed

    def search_products(self, query: str) -> List[Product]:
        """
        Case-insensitive search over name, description, category and tags.
        The query is split on whitespace; a product matches when any term is
        found. An empty query returns the whole catalog.
        """
        terms = (query or "").lower().split()
        if not terms:
            return self.products

        def searchable(p: Product) -> str:
            return " ".join([p.name, p.description, p.category, *p.tags]).lower()

        return [p for p in self._products if any(t in searchable(p) for t in terms)]

    # ---------------------------
    # Quotations
    # ---------------------------

    async def add_quotation(
        self,
        client_id: str,
        items: Sequence[QuotationItem],
        total,
        status: QuotationStatus,
        created_by: str,
    ) -> Quotation:
        """
        `total` is the pre-VAT subtotal of `items`; callers compute it with
        quoting.pricing.calculate_subtotal. It is stored as given.
        """
        now = self._clock()
        quotation = Quotation(
            id=self._new_id(),
            client_id=client_id,
            items=tuple(items),
            total=total,
            status=status,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self._quotations = [*self._quotations, quotation]
        await self._save("_quotations")
        _logger.info(f"Quotation {quotation.id} created for client {client_id}")
        return quotation

    async def update_quotation(
        self, quotation_id: str, update: QuotationUpdate
    ) -> Optional[Quotation]:
        current = self.get_quotation(quotation_id)
        if current is None:
            return None
        fields = changes(update)
        if "items" in fields:
            fields["items"] = tuple(fields["items"])
        updated = dataclasses.replace(current, **fields, updated_at=self._clock())
        self._quotations = [
            updated if q.id == quotation_id else q for q in self._quotations
        ]
        await self._save("_quotations")
        _logger.info(f"Quotation {quotation_id} updated")
        return updated

    async def delete_quotation(self, quotation_id: str) -> bool:
        remaining = [q for q in self._quotations if q.id != quotation_id]
        removed = len(remaining) != len(self._quotations)
        self._quotations = remaining
        await self._save("_quotations")
        if removed:
            _logger.info(f"Quotation {quotation_id} deleted")
        return removed

    def search_quotations(self, query: str) -> List[Quotation]:
        """
        Substring match over client name, surname, company and quotation id.
        Quotations whose client is gone only show up for an empty query.
        """
        if not (query or "").strip():
            return self.quotations
        results = []
        for q in self._quotations:
            client = self.get_client(q.client_id)
            if client and matches_text(
                query, client.name, client.surname, client.company, q.id
            ):
                results.append(q)
        return results

    def get_dashboard_stats(self) -> DashboardStats:
        counts: Dict[QuotationStatus, int] = {s: 0 for s in QuotationStatus}
        for q in self._quotations:
            counts[q.status] += 1

        accepted = counts[QuotationStatus.ACCEPTED]
        sent_total = (
            counts[QuotationStatus.SENT]
            + accepted
            + counts[QuotationStatus.DECLINED]
        )
        conversion = 0
        if sent_total > 0:
            # halves round up: 1 of 8 is 13%
            percent = Decimal(accepted) * 100 / sent_total
            conversion = int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

        recent = sorted(self._quotations, key=lambda q: q.created_at, reverse=True)
        return DashboardStats(
            total_quotations=len(self._quotations),
            total_clients=len(self._clients),
            total_products=len(self._products),
            conversion_rate=conversion,
            status_counts={s: n for s, n in counts.items() if n > 0},
            recent_quotations=tuple(recent[:RECENT_QUOTATIONS]),
        )

    # ---------------------------
    # Sample requests & delivery notes
    # ---------------------------

    def _transition(self, record, target: RequestStatus, actor: Optional[str]):
        if record.status not in _TRANSITIONS[target]:
            raise InvalidTransitionError(
                f"Cannot mark a {record.status.value} request as {target.value}"
            )
        if target is RequestStatus.APPROVED:
            return dataclasses.replace(
                record, status=target, approved_by=actor, approved_at=self._clock()
            )
        return dataclasses.replace(record, status=target)

    async def add_sample_request(
        self, client_id: str, product_ids: Sequence[str], notes: str, requested_by: str
    ) -> SampleRequest:
        request = SampleRequest(
            id=self._new_id(),
            client_id=client_id,
            product_ids=tuple(product_ids),
            notes=notes,
            status=RequestStatus.PENDING,
            requested_by=requested_by,
            requested_at=self._clock(),
        )
        self._sample_requests = [*self._sample_requests, request]
        await self._save("_sample_requests")
        _logger.info(f"Sample request {request.id} created for client {client_id}")
        return request

    async def _set_sample_status(
        self, request_id: str, target: RequestStatus, actor: Optional[str] = None
    ) -> Optional[SampleRequest]:
        current = self.get_sample_request(request_id)
        if current is None:
            return None
        updated = self._transition(current, target, actor)
        self._sample_requests = [
            updated if r.id == request_id else r for r in self._sample_requests
        ]
        await self._save("_sample_requests")
        _logger.info(f"Sample request {request_id} {target.value}")
        return updated

    async def approve_sample_request(self, request_id: str, approved_by: str):
        return await self._set_sample_status(
            request_id, RequestStatus.APPROVED, approved_by
        )

    async def reject_sample_request(self, request_id: str):
        return await self._set_sample_status(request_id, RequestStatus.REJECTED)

    async def mark_sample_delivered(self, request_id: str):
        return await self._set_sample_status(request_id, RequestStatus.DELIVERED)

    def search_sample_requests(self, query: str) -> List[SampleRequest]:
        return self._search_by_client(self._sample_requests, query)

    async def add_delivery_note(
        self,
        client_id: str,
        items: Sequence[DeliveryItem],
        notes: str,
        requested_by: str,
    ) -> DeliveryNote:
        note = DeliveryNote(
            id=self._new_id(),
            client_id=client_id,
            items=tuple(items),
            notes=notes,
            status=RequestStatus.PENDING,
            requested_by=requested_by,
            requested_at=self._clock(),
        )
        self._delivery_notes = [*self._delivery_notes, note]
        await self._save("_delivery_notes")
        _logger.info(f"Delivery note {note.id} created for client {client_id}")
        return note

    async def _set_note_status(
        self, note_id: str, target: RequestStatus, actor: Optional[str] = None
    ) -> Optional[DeliveryNote]:
        current = self.get_delivery_note(note_id)
        if current is None:
            return None
        updated = self._transition(current, target, actor)
        self._delivery_notes = [
            updated if n.id == note_id else n for n in self._delivery_notes
        ]
        await self._save("_delivery_notes")
        _logger.info(f"Delivery note {note_id} {target.value}")
        return updated

    async def approve_delivery_note(self, note_id: str, approved_by: str):
        return await self._set_note_status(note_id, RequestStatus.APPROVED, approved_by)

    async def reject_delivery_note(self, note_id: str):
        return await self._set_note_status(note_id, RequestStatus.REJECTED)

    async def mark_delivery_note_delivered(self, note_id: str):
        return await self._set_note_status(note_id, RequestStatus.DELIVERED)

    def search_delivery_notes(self, query: str) -> List[DeliveryNote]:
        return self._search_by_client(self._delivery_notes, query)

    def _search_by_client(self, records: Sequence, query: str) -> list:
        if not (query or "").strip():
            return list(records)
        results = []
        for r in records:
            client = self.get_client(r.client_id)
            if client and matches_text(query, client.name, client.surname, client.company):
                results.append(r)
        return results

    # ---------------------------
    # Document library
    # ---------------------------

    async def add_document(
        self, product_id: str, doc_type: DocumentType, filename: str
    ) -> DocumentFile:
        # no real upload: the record only points at a placeholder url
        document = DocumentFile(
            id=self._new_id(),
            product_id=product_id,
            type=doc_type,
            filename=filename,
            uploaded_at=self._clock(),
        )
        self._documents = [*self._documents, document]
        await self._save("_documents")
        _logger.info(f"Document {document.id} added ({filename})")
        return document

    async def delete_document(self, document_id: str) -> bool:
        remaining = [d for d in self._documents if d.id != document_id]
        removed = len(remaining) != len(self._documents)
        self._documents = remaining
        await self._save("_documents")
        return removed

    def search_documents(self, query: str) -> List[DocumentFile]:
        results = []
        for d in self._documents:
            product = self.get_product(d.product_id)
            if matches_text(query, d.filename, d.type.value) or (
                product and matches_text(query, product.name)
            ):
                results.append(d)
        return results
