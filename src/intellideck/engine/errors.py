class SessionStateError(RuntimeError):
    """Raised when a study session operation is invalid in its current state"""
