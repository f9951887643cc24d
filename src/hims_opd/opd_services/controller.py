from __future__ import annotations

from flask import Flask

from ..common.money import ZERO
from ..common.responses import json_body, ok
from ..common.validators import optional_bool, optional_decimal, optional_str, parse_bool
from ..container import Container
from .model import NewOpdService, OpdServiceUpdate


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    base = f"{prefix}/opd-services"

    @app.route(base, methods=["GET"], endpoint="opd_services_list")
    def opd_services_list():
        rows = container.opd_service_service.list_active()
        return ok(rows, count=len(rows))

    @app.route(base, methods=["POST"], endpoint="opd_services_create")
    def opd_services_create():
        body = json_body()
        service = container.opd_service_service.create(
            NewOpdService(
                service_code=body.get("service_code") or body.get("service_id"),
                service_name=body.get("service_name"),
                service_head=body.get("service_head"),
                service_rate=optional_decimal(body.get("service_rate"), "service_rate", default=ZERO),
                required_consultant=parse_bool(body.get("required_consultant")),
                price_editable=parse_bool(body.get("price_editable")),
            )
        )
        return ok(service, message="Service created successfully", status=201)

    @app.route(f"{base}/heads", methods=["GET"], endpoint="opd_services_heads")
    def opd_services_heads():
        return ok(container.opd_service_service.heads())

    @app.route(f"{base}/head/<service_head>", methods=["GET"], endpoint="opd_services_by_head")
    def opd_services_by_head(service_head: str):
        rows = container.opd_service_service.list_by_head(service_head)
        return ok(rows, count=len(rows))

    @app.route(f"{base}/<int:service_id>", methods=["GET"], endpoint="opd_services_get")
    def opd_services_get(service_id: int):
        return ok(container.opd_service_service.get(service_id))

    @app.route(f"{base}/<int:service_id>", methods=["PUT"], endpoint="opd_services_update")
    def opd_services_update(service_id: int):
        body = json_body()
        service = container.opd_service_service.update(
            service_id,
            OpdServiceUpdate(
                service_name=optional_str(body.get("service_name")),
                service_head=optional_str(body.get("service_head")),
                service_rate=optional_decimal(body.get("service_rate"), "service_rate"),
                required_consultant=optional_bool(body.get("required_consultant")),
                price_editable=optional_bool(body.get("price_editable")),
                is_active=optional_bool(body.get("is_active")),
            ),
        )
        return ok(service, message="Service updated successfully")

    @app.route(f"{base}/<int:service_id>", methods=["DELETE"], endpoint="opd_services_delete")
    def opd_services_delete(service_id: int):
        container.opd_service_service.deactivate(service_id)
        return ok(None, message="Service deleted successfully")
