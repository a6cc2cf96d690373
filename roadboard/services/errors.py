class ServiceError(RuntimeError):
    """Recoverable service error (validation/uniqueness/etc.)."""


class NotFound(ServiceError):
    """Referenced entity id does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")
