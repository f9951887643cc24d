from __future__ import annotations

import csv
import io
from typing import Iterable, Sequence

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.responses import ok, to_jsonable
from ..common.validators import parse_int
from ..container import Container
from ..core.exceptions import ValidationError
from .model import PeriodExpense, PeriodTotals

_PERIOD_FIELDS = ["period", "patient_count", "total_amount", "total_discount", "total_paid", "total_balance", "total_expense"]


def _period_rows(opd: Sequence[PeriodTotals], expenses: Sequence[PeriodExpense]) -> list[dict]:
    expense_by_period = {e.period: e.total_expense for e in expenses}
    periods = sorted({r.period for r in opd} | set(expense_by_period))
    opd_by_period = {r.period: r for r in opd}

    rows = []
    for p in periods:
        row = to_jsonable(opd_by_period.get(p) or PeriodTotals(period=p))
        row["total_expense"] = to_jsonable(expense_by_period.get(p, 0))
        rows.append(row)
    return rows


def _wants_csv() -> bool:
    return (request.args.get("format") or "").strip().lower() == "csv"


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    base = f"{prefix}/reports"

    def _csv_response(filename: str, fieldnames: list[str], rows: Iterable[dict]):
        """Render report rows as a UTF-8 (BOM) CSV download, readable by Excel."""

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route(f"{base}/daily", methods=["GET"], endpoint="reports_daily")
    def reports_daily():
        raw = request.args.get("date")
        report_date = parse_iso_date(raw, "date") if raw else now_local().date()
        report = container.report_service.daily(report_date)

        if _wants_csv():
            fields = [
                "shift_type",
                "patient_count",
                "total_amount",
                "total_discount",
                "total_paid",
                "total_balance",
                "total_dr_share",
                "total_hospital_share",
                "cancelled_count",
                "total_refund",
            ]
            return _csv_response(
                f"daily_report_{report_date.isoformat()}.csv",
                fields,
                (to_jsonable(r) for r in report.opd_summary),
            )
        return ok(report)

    @app.route(f"{base}/shift", methods=["GET"], endpoint="reports_shift")
    def reports_shift():
        raw = request.args.get("shiftId") or request.args.get("shift_id")
        if not raw:
            raise ValidationError("shiftId is required")
        return ok(container.report_service.shift(parse_int(raw, "shiftId")))

    @app.route(f"{base}/monthly", methods=["GET"], endpoint="reports_monthly")
    def reports_monthly():
        today = now_local().date()
        year = parse_int(request.args.get("year") or today.year, "year")
        month = parse_int(request.args.get("month") or today.month, "month")
        report = container.report_service.monthly(year, month)

        if _wants_csv():
            return _csv_response(
                f"monthly_report_{year}_{month:02d}.csv",
                _PERIOD_FIELDS,
                _period_rows(report.daily_summaries, report.expense_summary),
            )
        return ok(report)

    @app.route(f"{base}/yearly", methods=["GET"], endpoint="reports_yearly")
    def reports_yearly():
        year = parse_int(request.args.get("year") or now_local().year, "year")
        report = container.report_service.yearly(year)

        if _wants_csv():
            return _csv_response(
                f"yearly_report_{year}.csv",
                _PERIOD_FIELDS,
                _period_rows(report.monthly_summaries, report.expense_summary),
            )
        return ok(report)

    @app.route(f"{base}/services", methods=["GET"], endpoint="reports_services")
    def reports_services():
        today = now_local().date()
        start_raw = request.args.get("startDate")
        end_raw = request.args.get("endDate")
        start = parse_iso_date(start_raw, "startDate") if start_raw else today
        end = parse_iso_date(end_raw, "endDate") if end_raw else start
        return ok(container.report_service.services(start, end))
