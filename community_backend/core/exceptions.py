"""
Typed failures raised by the data-access and bot gateway layers.

Routes translate these into HTTP responses; services never return them as values.
"""


class CommunityBackendError(Exception):
    """Base class for all application errors"""


class DocumentStoreError(CommunityBackendError):
    """A read or write against the document store failed"""


class DuplicateRecordError(DocumentStoreError):
    """A write violated a unique constraint"""


class RecordNotFoundError(DocumentStoreError):
    """The requested record does not exist"""

    def __init__(self, collection: str, key: str):
        super().__init__(f"No record in {collection} matching {key}")
        self.collection = collection
        self.key = key


class BotGatewayError(CommunityBackendError):
    """The Discord bot gateway call failed or returned a non-2xx status"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


INTERNAL_SERVER_ERROR = "An internal server error occurred"
