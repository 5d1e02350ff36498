import pytest
from openpyxl import load_workbook

from mini_recon.config import ReconConfig
from mini_recon.currency.rates import ExchangeRateTable
from mini_recon.matching import ReconciliationEngine
from mini_recon.reports.excel_generator import ExcelReportGenerator
from mini_recon.utils.exceptions import ReportGenerationError


@pytest.fixture
def run(rates, make_txn):
    """Reconcile a small mixed sample and return (engine, result, summary)."""
    engine = ReconciliationEngine(ReconConfig(), rates=rates)
    internal = [
        make_txn("T1", 100),
        make_txn("T2", 10, currency="USD"),
        make_txn("T3", 5, status="Pending"),
        make_txn("T4", 7, currency="XYZ"),
    ]
    provider = [
        make_txn("T1", 100),
        make_txn("T2", 1000),
        make_txn("T3", 5, status="Completed"),
        make_txn("T5", 3),
    ]
    result = engine.reconcile(internal, provider)
    summary = engine.generate_summary(
        internal_transactions=internal,
        provider_transactions=provider,
        result=result,
        internal_filename="internal.csv",
        provider_filename="provider.csv",
        processing_time=0.1,
    )
    return engine, result, summary


def test_generates_all_sheets(tmp_path, run):
    engine, result, summary = run
    output = tmp_path / "reports" / "report.xlsx"

    path = ExcelReportGenerator(engine.config).generate_report(
        summary=summary, result=result, rates=engine.rates, output_path=output
    )

    wb = load_workbook(path)
    assert wb.sheetnames == [
        "Summary",
        "Matched Transactions",
        "Internal Only",
        "Provider Only",
        "Discrepancies",
        "Exchange Rates",
    ]


def test_sheet_contents(tmp_path, run):
    engine, result, summary = run
    path = ExcelReportGenerator(engine.config).generate_report(
        summary=summary, result=result, rates=engine.rates, output_path=tmp_path / "r.xlsx"
    )
    wb = load_workbook(path)

    matched = wb["Matched Transactions"]
    assert [c.value for c in matched[1]] == ["Reference", "Amount", "Currency", "Status", "Agreement"]
    assert [row[0] for row in matched.iter_rows(min_row=2, values_only=True)] == ["T1", "T2", "T3"]
    assert [row[4] for row in matched.iter_rows(min_row=2, values_only=True)] == [
        "Agreed",
        "Discrepancy",
        "Discrepancy",
    ]

    discrepancies = list(wb["Discrepancies"].iter_rows(min_row=2, values_only=True))
    assert [row[0] for row in discrepancies] == ["T2", "T3"]
    assert discrepancies[1][4:6] == ("Pending", "Completed")
    assert discrepancies[1][8] == "status"

    internal_only = list(wb["Internal Only"].iter_rows(min_row=2, values_only=True))
    assert internal_only == [("T4", 7, "XYZ", "Completed")]

    summary_values = [c.value for c in wb["Summary"]["A"]]
    assert "Warnings" in summary_values


def test_disabled_sheets_are_omitted(tmp_path, run):
    engine, result, summary = run
    config = ReconConfig()
    config.output.sheets.exchange_rates.enabled = False
    config.output.sheets.summary.name = "Overview"

    path = ExcelReportGenerator(config).generate_report(
        summary=summary, result=result, rates=engine.rates, output_path=tmp_path / "r.xlsx"
    )

    sheetnames = load_workbook(path).sheetnames
    assert "Exchange Rates" not in sheetnames
    assert sheetnames[0] == "Overview"


def test_all_sheets_disabled(tmp_path, run):
    engine, result, summary = run
    config = ReconConfig()
    for name in ["summary", "matched", "internal_only", "provider_only", "discrepancies", "exchange_rates"]:
        getattr(config.output.sheets, name).enabled = False

    with pytest.raises(ReportGenerationError):
        ExcelReportGenerator(config).generate_report(
            summary=summary, result=result, rates=engine.rates, output_path=tmp_path / "r.xlsx"
        )


def test_missing_currency_shown_as_table_base(tmp_path, make_txn):
    usd_base = ExchangeRateTable({"KSH": 130}, base_currency="USD")
    engine = ReconciliationEngine(ReconConfig(), rates=usd_base)
    internal = [make_txn("T1", 10)]
    result = engine.reconcile(internal, [])
    summary = engine.generate_summary(
        internal_transactions=internal,
        provider_transactions=[],
        result=result,
        internal_filename="internal.csv",
        provider_filename="provider.csv",
        processing_time=0.1,
    )

    path = ExcelReportGenerator(engine.config).generate_report(
        summary=summary, result=result, rates=usd_base, output_path=tmp_path / "r.xlsx"
    )

    internal_only = list(load_workbook(path)["Internal Only"].iter_rows(min_row=2, values_only=True))
    assert internal_only == [("T1", 10, "USD", "Completed")]
    assert summary.currencies == ["USD"]
    assert not summary.has_multiple_currencies
