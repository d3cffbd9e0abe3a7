"""Form validation package."""

from payment_tracker.validation.validator import PaymentFormValidator, parse_amount

__all__ = ["PaymentFormValidator", "parse_amount"]
