"""Error taxonomy shared by the ledger client, the importer and the controller."""


class SheetfolioError(Exception):
    """Base class for every error the bot reports back to the user."""


class LedgerError(SheetfolioError):
    pass


class ConnectivityError(LedgerError):
    """No usable response: DNS/connect failure, timeout, broken transport."""


class RemoteError(LedgerError):
    """The ledger answered, but with an error payload or an unexpected shape."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(SheetfolioError):
    """User input (CSV or command arguments) has nothing usable in it."""


class NotConfiguredError(SheetfolioError):
    """An action needs the ledger endpoint but none has been saved yet."""
