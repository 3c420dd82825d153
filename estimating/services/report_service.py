# estimating/services/report_service.py
from typing import List

import pandas as pd
from sqlalchemy.orm import Session

from estimating.domain.customer_estimate import build_customer_estimate
from estimating.domain.types import CustomerEstimate, InternalCosting, VisibilitySettings
from estimating.services.estimate_repository import (
    EstimateRepository,
    row_costing,
    row_customer_estimate,
    row_visibility,
)

CUSTOMER_COLUMNS = ["section", "title", "description", "quantity", "unit", "unit_price", "line_total"]


def customer_columns(visibility: VisibilitySettings) -> List[str]:
    hidden = set()
    if not visibility.show_descriptions:
        hidden.add("description")
    if not visibility.show_quantities:
        hidden.add("quantity")
    if not visibility.show_units:
        hidden.add("unit")
    if not visibility.show_unit_prices:
        hidden.add("unit_price")
    if not visibility.show_line_totals:
        hidden.add("line_total")
    return [c for c in CUSTOMER_COLUMNS if c not in hidden]


class ReportService:
    """
    Human-readable DataFrame reports of an estimate.

    This service does NOT persist data.
    """

    def __init__(self, db: Session, repository: EstimateRepository):
        self.db = db
        self.repository = repository

    def generate_df_report(self, *, estimate_id: str) -> pd.DataFrame:
        '''
        Internal costing report: estimate header, one block per section
        with cost and sell columns, then the aggregate lines.
        '''
        # 1️⃣ load
        row = self.repository.get_estimate(estimate_id)
        costing = row_costing(row)
        if costing is None:
            raise ValueError(f"Estimate {estimate_id} has no costing")

        rows = []
        # header
        rows.append(["Internal costing"])
        rows.append(["Estimate", row.title])
        rows.append(["Template", row.template_id])
        rows.append(["Status", row.status.value])
        rows.append(["", ""])

        # 2️⃣ sections
        for section in costing.sections:
            rows.append([section.title])
            rows.append(["Title", "Kind", "Quantity", "Unit", "Unit cost", "Unit price",
                         "Line cost", "Line total", "Flags"])
            for item in sorted(section.items, key=lambda i: i.sort_order):
                rows.append([
                    item.title,
                    item.kind.value,
                    item.quantity,
                    item.unit,
                    item.unit_cost,
                    item.unit_price,
                    item.line_cost,
                    item.line_total,
                    self._flags(item),
                ])
            rows.append(["Section total", "", "", "", "", "", "", section.section_total, ""])
            rows.append(["", ""])

        # 3️⃣ aggregates
        rows.extend(self._aggregate_rows(costing))
        if costing.assumptions:
            rows.append(["", ""])
            rows.append(["Assumptions"])
            rows.extend([a] for a in costing.assumptions)

        return pd.DataFrame(rows)

    @staticmethod
    def _flags(item) -> str:
        flags = []
        if item.is_manual_override:
            flags.append("manual")
        if item.is_auto_rated:
            flags.append("auto")
        if item.is_provisional:
            flags.append("provisional")
        if item.is_qty_locked:
            flags.append("qty-locked")
        return ",".join(flags)

    @staticmethod
    def _aggregate_rows(costing: InternalCosting) -> list:
        return [
            ["Subtotal", costing.subtotal],
            [f"Overhead ({costing.overhead_pct}%)", costing.overhead],
            [f"Margin ({costing.margin_pct}%)", costing.margin],
            [f"Contingency ({costing.contingency_pct}%)", costing.contingency],
            [f"VAT ({costing.vat_pct}%)", costing.vat],
            ["Total", costing.total],
        ]

    def customer_df_report(self, *, estimate_id: str) -> pd.DataFrame:
        '''
        Customer estimate as a table, shaped by the estimate's
        VisibilitySettings. Visibility only hides columns/rows, it never
        changes a figure.
        '''
        row = self.repository.get_estimate(estimate_id)
        estimate = row_customer_estimate(row)
        if estimate is None:
            costing = row_costing(row)
            if costing is None:
                raise ValueError(f"Estimate {estimate_id} has no costing")
            estimate = build_customer_estimate(costing)
        return self.customer_frame(estimate, row_visibility(row))

    def customer_frame(self, estimate: CustomerEstimate, visibility: VisibilitySettings) -> pd.DataFrame:
        columns = customer_columns(visibility)
        records = []

        if not visibility.show_grand_total_only:
            for section in estimate.sections:
                for item in section.items:
                    if item.is_provisional and not visibility.show_provisional_sums:
                        continue
                    records.append({
                        "section": section.title,
                        "title": item.title,
                        "description": item.description,
                        "quantity": item.quantity,
                        "unit": item.unit,
                        "unit_price": item.unit_price,
                        "line_total": item.line_total if visibility.show_line_totals else None,
                    })
                if visibility.show_section_totals:
                    records.append({"section": section.title, "title": "Section total",
                                    "line_total": section.section_total})
            if visibility.show_subtotal:
                records.append({"title": "Subtotal", "line_total": estimate.subtotal})
            if visibility.show_vat and not visibility.show_totals_without_vat:
                records.append({"title": f"VAT ({estimate.vat_pct}%)", "line_total": estimate.vat})

        if visibility.show_totals_without_vat:
            records.append({"title": "Total (excl. VAT)", "line_total": estimate.subtotal})
        else:
            records.append({"title": "Total", "line_total": estimate.total})

        # totals live in line_total even when line totals are hidden per item
        frame_columns = columns if "line_total" in columns else columns + ["line_total"]
        return pd.DataFrame.from_records(records, columns=frame_columns)
