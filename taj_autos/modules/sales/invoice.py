from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ...config import TEMPLATES_DIR
from ...constants import CURRENCY, SHOP_ADDRESS, SHOP_NAME
from ...database.repositories import Sale
from ...utils.helpers import fmt_money

_log = logging.getLogger(__name__)


class InvoiceRenderer:
    """
    Renders a committed Sale as a printable receipt.

    Used directly (render_html / render_pdf) or handed to SalesService as its
    invoice collaborator; calling the instance writes the receipt into
    `output_dir` when one is configured.
    """

    TEMPLATE = "invoice.html"

    def __init__(
        self,
        output_dir: str | Path | None = None,
        *,
        as_pdf: bool = False,
        templates_dir: str | Path = TEMPLATES_DIR,
    ):
        self.output_dir = Path(output_dir) if output_dir else None
        self.as_pdf = as_pdf
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["money"] = fmt_money

    def render_html(self, sale: Sale) -> str:
        template = self.env.get_template(self.TEMPLATE)
        return template.render(
            sale=sale,
            shop={"name": SHOP_NAME, "address": SHOP_ADDRESS, "currency": CURRENCY},
        )

    def render_pdf(self, sale: Sale, path: str | Path) -> Path:
        # WeasyPrint pulls in native libraries; only load it when a PDF is asked for
        from weasyprint import HTML

        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        HTML(string=self.render_html(sale)).write_pdf(str(out))
        return out

    def __call__(self, sale: Sale) -> Path | None:
        if self.output_dir is None:
            return None
        self.output_dir.mkdir(parents=True, exist_ok=True)
        stem = f"invoice-{sale.sale_id}"
        if self.as_pdf:
            out = self.render_pdf(sale, self.output_dir / f"{stem}.pdf")
        else:
            out = self.output_dir / f"{stem}.html"
            out.write_text(self.render_html(sale), encoding="utf-8")
        _log.info("invoice for sale %s written to %s", sale.sale_id, out)
        return out
