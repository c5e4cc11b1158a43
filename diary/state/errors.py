# user-facing failures raised by the diary workspace
# routers turn these into http errors, the message is shown to the user as-is


class DiaryError(Exception):
    """base for workspace failures that carry a user-facing message"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DraftValidationError(DiaryError):
    """the intent was rejected locally, nothing was sent to the store"""


class DraftFieldError(DiaryError):
    """a draft field was given a value of the wrong type, or does not exist"""


class StoreOperationError(DiaryError):
    """the entry store rejected a write, local state is unchanged"""
