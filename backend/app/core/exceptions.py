class FeynmanError(Exception):
    """Base exception for Feynman Teacher application."""

    pass


class RecordNotFoundError(FeynmanError):
    """Raised when a referenced entity id does not exist."""

    def __init__(self, entity: str, record_id: int | str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} with id {record_id} not found")


class StorageError(FeynmanError):
    """Raised when a storage backend fails to read or write."""

    pass


class AIGatewayError(FeynmanError):
    """Raised when the upstream AI provider call fails or returns nothing usable."""

    pass


class QuizFinishedError(FeynmanError):
    """Raised when answering a quiz attempt that has already ended."""

    pass
