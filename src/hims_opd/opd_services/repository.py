from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewOpdService, OpdService, OpdServiceUpdate


class OpdServiceRepository(Protocol):
    def get_by_id(self, service_id: int) -> Optional[OpdService]:
        raise NotImplementedError

    def list_active(self) -> Sequence[OpdService]:
        raise NotImplementedError

    def list_by_head(self, service_head: str) -> Sequence[OpdService]:
        raise NotImplementedError

    def heads(self) -> Sequence[str]:
        raise NotImplementedError

    def create(self, service: NewOpdService) -> int:
        raise NotImplementedError

    def update(self, service_id: int, changes: OpdServiceUpdate) -> bool:
        raise NotImplementedError

    def deactivate(self, service_id: int) -> bool:
        raise NotImplementedError
