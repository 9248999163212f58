from typing import List

from store.models import SampleRequest
from utils.pure import generate_markdown_table
from views.modal_sample_form import SampleRequestModal
from views.request_screen import RequestScreen


class SamplesScreen(RequestScreen):
    """Sample requests: products a client wants to try before quoting."""

    ENTITY = "sample request"
    COLLECTION = "sampleRequests"
    FORM_MODAL = SampleRequestModal

    def records(self, query: str) -> List[SampleRequest]:
        return self.app.state.data.search_sample_requests(query)

    def get_record(self, record_id: str):
        return self.app.state.data.get_sample_request(record_id)

    def item_count(self, record: SampleRequest) -> int:
        return len(record.product_ids)

    def items_markdown(self, record: SampleRequest) -> str:
        data = self.app.state.data
        rows = []
        for product_id in record.product_ids:
            product = data.get_product(product_id)
            rows.append(
                [data.product_name(product_id), product.category if product else "-"]
            )
        return "#### Requested Products\n\n" + generate_markdown_table(
            ["Product", "Category"], rows, ["l", "l"]
        )

    async def approve(self, record_id: str, approved_by: str):
        return await self.app.state.data.approve_sample_request(record_id, approved_by)

    async def reject(self, record_id: str):
        return await self.app.state.data.reject_sample_request(record_id)

    async def mark_delivered(self, record_id: str):
        return await self.app.state.data.mark_sample_delivered(record_id)
