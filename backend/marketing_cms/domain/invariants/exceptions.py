class InvariantViolation(Exception):
    """Raised when a page or its content would be persisted in a state the model forbids."""
