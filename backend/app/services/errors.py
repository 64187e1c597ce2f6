from __future__ import annotations


class CatalogError(Exception):
    pass


class NotFoundError(CatalogError):
    def __init__(self, kind: str, entity_id: int) -> None:
        super().__init__(f"{kind} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id


class CatalogStoreError(CatalogError):
    pass
