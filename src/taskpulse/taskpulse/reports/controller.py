from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body, ok
from ..container import Container
from ..security.context import auth_required, current_user


def register(app: Flask, container: Container) -> None:
    login_required = auth_required(container.caller_resolver)
    reports = container.report_service

    @app.route("/api/reports", methods=["POST"], endpoint="reports_create")
    @login_required
    def create_report():
        report = reports.create(current_user(), json_body())
        return ok({"report": report.to_dict()}, message="Daily report submitted successfully", status=201)

    @app.route("/api/reports", methods=["GET"], endpoint="reports_list")
    @login_required
    def list_reports():
        page = reports.list_from_query(current_user(), request.args)
        body = page.to_dict()
        data = body.pop("data")
        return ok(data, **body)

    @app.route("/api/reports/today", methods=["GET"], endpoint="reports_today")
    @login_required
    def today_report():
        report = reports.get_today(current_user())
        return ok({"report": report.to_dict() if report else None})

    @app.route("/api/reports/stats", methods=["GET"], endpoint="reports_stats")
    @login_required
    def report_stats():
        stats = reports.stats(
            current_user(),
            start_date=parse_optional_date(request.args.get("startDate")),
            end_date=parse_optional_date(request.args.get("endDate")),
        )
        return ok(stats.to_dict())

    @app.route("/api/reports/<int:report_id>", methods=["GET"], endpoint="reports_get")
    @login_required
    def get_report(report_id: int):
        report = reports.get(current_user(), report_id)
        return ok({"report": report.to_dict()})

    @app.route("/api/reports/<int:report_id>", methods=["PUT"], endpoint="reports_update")
    @login_required
    def update_report(report_id: int):
        report = reports.update(current_user(), report_id, json_body())
        return ok({"report": report.to_dict()}, message="Report updated successfully")

    @app.route("/api/reports/<int:report_id>", methods=["DELETE"], endpoint="reports_delete")
    @login_required
    def delete_report(report_id: int):
        reports.delete(current_user(), report_id)
        return ok(message="Report deleted successfully")

    @app.route("/api/reports/<int:report_id>/force", methods=["DELETE"], endpoint="reports_force_delete")
    @login_required
    def force_delete_report(report_id: int):
        reports.force_delete(current_user(), report_id)
        return ok(message="Report force deleted successfully")
