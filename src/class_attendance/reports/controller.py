from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, today_local
from ..common.http import date_range_args, optional_int_arg
from ..common.serialization import to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/classes/<int:class_id>/attendance", methods=["GET"], endpoint="class_report")
    def class_report(class_id: int):
        start, end = date_range_args(container.default_report_days)
        report = container.report_composer.class_report(class_id, start, end, year=optional_int_arg("year"))
        return jsonify(to_jsonable(report))

    @app.route("/classes/<int:class_id>/attendance/monthly", methods=["GET"], endpoint="class_monthly")
    def class_monthly(class_id: int):
        year = optional_int_arg("year") or today_local().year
        rows = container.statistics.monthly_breakdown(class_id, year)
        return jsonify({"class_id": class_id, "year": year, "months": to_jsonable(rows)})

    @app.route("/attendance/daily/<day>", methods=["GET"], endpoint="daily_report")
    def daily_report(day: str):
        return jsonify(to_jsonable(container.report_composer.daily_report(parse_iso_date(day))))

    @app.route("/students/<int:student_id>/attendance", methods=["GET"], endpoint="student_report")
    def student_report(student_id: int):
        start, end = date_range_args(container.default_report_days)
        report = container.report_composer.student_report(
            student_id,
            start,
            end,
            class_id=optional_int_arg("class_id"),
        )
        return jsonify(to_jsonable(report))

    @app.route("/attendance/summary", methods=["GET"], endpoint="institution_summary")
    def institution_summary():
        start, end = date_range_args(container.default_report_days)
        raw_ids = request.args.get("class_ids")
        class_ids = [int(c) for c in raw_ids.split(",") if c.strip().isdigit()] if raw_ids else None
        summary = container.report_composer.institution_summary(start, end, class_ids=class_ids)
        return jsonify(to_jsonable(summary))
