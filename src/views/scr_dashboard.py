from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import MarkdownViewer

from quoting.pricing import calculate_totals
from utils.messages import DataChangedMessage
from utils.pure import format_currency, format_date, generate_markdown_table
from views.base_screen import BaseScreen


class DashboardScreen(BaseScreen):
    """
    Headline counts, quotation status breakdown and the latest quotations.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-dashboard", show_table_of_contents=False)

    def on_mount(self) -> None:
        self.handle_reload()

    @on(DataChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        data = self.app.state.data
        stats = data.get_dashboard_stats()

        summary_md = (
            f"### Welcome, {self.app.state.user.full_name if self.app.state.user else ''}\n\n"
            f"- Total Quotations: {stats.total_quotations}\n"
            f"- Clients: {stats.total_clients}\n"
            f"- Products: {stats.total_products}\n"
            f"- Conversion Rate: {stats.conversion_rate}%\n\n"
        )

        if stats.status_counts:
            status_md = generate_markdown_table(
                ["Status", "Count"],
                [[s.value.capitalize(), n] for s, n in stats.status_counts.items()],
                ["l", "r"],
            )
        else:
            status_md = "_No quotations yet._"

        recent_rows = [
            [
                q.id,
                data.client_label(q.client_id),
                format_date(q.created_at),
                q.status.value,
                format_currency(calculate_totals(q.items).grand_total),
            ]
            for q in stats.recent_quotations
        ]
        recent_md = (
            generate_markdown_table(
                ["ID", "Client", "Date", "Status", "Total (incl. VAT)"],
                recent_rows,
                ["l", "l", "l", "c", "r"],
            )
            or "_No quotations yet._"
        )

        md = (
            summary_md
            + "### Quotation Status\n\n"
            + status_md
            + "\n\n### Recent Quotations\n\n"
            + recent_md
        )
        await self.query_one("#md-dashboard", MarkdownViewer).document.update(md)
