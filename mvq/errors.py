class InvalidInputError(ValueError):
    """Raised when the quantizer is handed no image, or an image it cannot read."""
