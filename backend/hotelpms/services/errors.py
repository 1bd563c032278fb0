"""
Service-layer lookup errors
"""


class NotFoundError(LookupError):
    """Referenced room, guest, booking or invoice does not exist."""

    status_code: int = 404

    def __init__(self, entity: str, key):
        super().__init__(f"{entity} {key} not found")
        self.entity = entity
        self.key = key
        self.message = str(self)
