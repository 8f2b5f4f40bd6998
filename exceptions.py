"""Custom exceptions for the run-tui tool"""


class RunTUIError(Exception):
    """Base exception for all run-tui errors"""
    pass


class ConfigurationError(RunTUIError):
    """Raised when there's an issue with configuration"""
    pass


class CatalogError(RunTUIError):
    """Raised when a parameter catalog cannot be loaded"""
    pass


class SessionError(RunTUIError):
    """Raised when the interactive session fails unrecoverably (e.g. terminal I/O)"""
    pass


class UnexpectedStateError(RunTUIError):
    """Raised when a finished session hands back a state of the wrong shape"""
    pass


class SessionCancelled(RunTUIError):
    """Raised when the session is cancelled from outside before it finished"""
    pass
