import pandas as pd
import pytest

from estimating.domain.types import VisibilitySettings
from estimating.errors import NotFound
from estimating.services.report_service import CUSTOMER_COLUMNS


@pytest.fixture
def generated(services, estimate, db):
    services.regeneration.regenerate(estimate_id=estimate.id)
    db.commit()
    return estimate


def test_internal_report(services, generated):
    df = services.reports.generate_df_report(estimate_id=generated.id)
    costing = services.estimates.get_costing(estimate_id=generated.id)

    assert isinstance(df, pd.DataFrame)
    totals = df[df[0] == "Total"]
    assert totals.iloc[0][1] == costing.total
    assert "Roofing" in set(df[0])


def test_customer_report_default_columns(services, generated):
    df = services.reports.customer_df_report(estimate_id=generated.id)

    assert list(df.columns) == CUSTOMER_COLUMNS
    assert df.iloc[-1]["title"] == "Total"
    assert "Subtotal" in set(df["title"])


def test_visibility_hides_columns_not_figures(services, generated, db):
    full = services.reports.customer_df_report(estimate_id=generated.id)
    services.repository.save_state(
        generated.id,
        visibility_settings=VisibilitySettings(show_unit_prices=False, show_quantities=False),
    )
    db.commit()

    hidden = services.reports.customer_df_report(estimate_id=generated.id)

    assert "unit_price" not in hidden.columns
    assert "quantity" not in hidden.columns
    assert hidden.iloc[-1]["line_total"] == full.iloc[-1]["line_total"]


def test_grand_total_only(services, generated, db):
    services.repository.save_state(generated.id, visibility_settings=VisibilitySettings(show_grand_total_only=True))
    db.commit()

    df = services.reports.customer_df_report(estimate_id=generated.id)

    assert list(df["title"]) == ["Total"]


def test_totals_without_vat(services, generated, db):
    services.repository.save_state(generated.id, visibility_settings=VisibilitySettings(show_totals_without_vat=True))
    db.commit()

    df = services.reports.customer_df_report(estimate_id=generated.id)

    assert df.iloc[-1]["title"] == "Total (excl. VAT)"
    assert not any(str(t).startswith("VAT") for t in df["title"])


def test_report_for_unknown_estimate(services):
    with pytest.raises(NotFound):
        services.reports.generate_df_report(estimate_id="missing")
