# hand-off links for sending a quotation by e-mail or WhatsApp
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from store.models import Client, Quotation
from utils import config


@dataclass(frozen=True)
class ShareLinks:
    subject: str
    body: str
    mailto: Optional[str]
    whatsapp: Optional[str]


def _encode(text: str) -> str:
    return quote(text, safe="")


def build_share_links(
    quotation: Quotation,
    client: Client,
    sales_name: str,
    company: str = config.COMPANY_NAME,
) -> ShareLinks:
    """
    The PDF is not attached by either link; the user attaches the exported
    file themselves.
    """
    subject = f"Quotation Q-{quotation.id} from {company} for {client.full_name}"
    body = (
        f"Dear {client.name},\n\n"
        "Please find attached your quotation. Thank you for your business.\n\n"
        f"Regards,\n{sales_name}\n{company}"
    )
    mailto = None
    if client.email:
        mailto = f"mailto:{client.email}?subject={_encode(subject)}&body={_encode(body)}"
    whatsapp = None
    digits = re.sub(r"\D", "", client.phone or "")
    if digits:
        whatsapp = f"https://wa.me/{digits}?text={_encode(body)}"
    return ShareLinks(subject, body, mailto, whatsapp)
