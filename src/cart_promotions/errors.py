# src/cart_promotions/errors.py


class CartPromotionsError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(CartPromotionsError, ValueError):
    """An entity was constructed with an invalid field.

    ``field`` names the offending field; the message always starts with it.
    """

    def __init__(self, field, message):
        self.field = field
        super().__init__(f"{field}: {message}")
