"""
Exceptions raised by the extraction engine.

Data-quality problems never raise; they become findings on the result.
These cover the cases where the engine cannot run at all.
"""


class StatementEngineError(Exception):
    """Base class for unrecoverable engine failures."""


class FormatNotFoundError(StatementEngineError, LookupError):
    """
    Raised when an explicit bank format id is not in the registry.

    Attributes:
        bank_id: The id that was requested
        available: Ids the registry does know about
    """

    def __init__(self, bank_id: str, available=None):
        self.bank_id = bank_id
        self.available = list(available or [])

        message = f"Bank format not found: {bank_id}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class FormatRegistryError(StatementEngineError):
    """
    Raised when a format configuration source exists but cannot be used.

    This should include:
    - The source that failed (file path or 'inline')
    - The format id, when the problem is inside one definition
    """

    def __init__(self, message: str, source: str = None, bank_id: str = None):
        self.source = source
        self.bank_id = bank_id

        details = []
        if source:
            details.append(f"Source: {source}")
        if bank_id:
            details.append(f"Format: {bank_id}")

        full_message = f"{message}\n" + "\n".join(details) if details else message
        super().__init__(full_message)
