class InputValidationError(ValueError):
    """Raised before any scheduling stage runs when the inputs cannot be scheduled."""
