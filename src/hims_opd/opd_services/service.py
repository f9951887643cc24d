from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from ..common.money import to_money
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import NewOpdService, OpdService, OpdServiceUpdate
from .repository import OpdServiceRepository

logger = logging.getLogger(__name__)


class OpdServiceService:
    """Catalogue of billable OPD services (soft-deleted, never removed)."""

    def __init__(self, services: OpdServiceRepository):
        self._services = services

    def create(self, data: NewOpdService) -> OpdService:
        code = require_non_empty(data.service_code, "service_id")
        name = require_non_empty(data.service_name, "service_name")
        head = require_non_empty(data.service_head, "service_head")
        if data.service_rate < 0:
            raise ValidationError("service_rate cannot be negative")

        service_id = self._services.create(
            replace(data, service_code=code, service_name=name, service_head=head, service_rate=to_money(data.service_rate))
        )
        logger.info("OPD service %s (%s) created", name, code)
        return self.get(service_id)

    def get(self, service_id: int) -> OpdService:
        service = self._services.get_by_id(int(service_id))
        if service is None:
            raise NotFoundError("Service not found")
        return service

    def list_active(self) -> Sequence[OpdService]:
        return self._services.list_active()

    def list_by_head(self, service_head: str) -> Sequence[OpdService]:
        return self._services.list_by_head(require_non_empty(service_head, "service_head"))

    def heads(self) -> Sequence[str]:
        return self._services.heads()

    def update(self, service_id: int, changes: OpdServiceUpdate) -> OpdService:
        if changes.is_empty():
            raise ValidationError("No fields to update")
        if changes.service_rate is not None and changes.service_rate < 0:
            raise ValidationError("service_rate cannot be negative")

        self.get(service_id)
        self._services.update(int(service_id), changes)
        return self.get(service_id)

    def deactivate(self, service_id: int) -> None:
        service = self.get(service_id)
        if service.is_active:
            self._services.deactivate(service.service_id)
            logger.info("OPD service %s deactivated", service.service_code)
