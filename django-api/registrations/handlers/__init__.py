from registrations.handlers.views import (
    CaptureView,
    CheckoutView,
    FeeQuoteView,
    RegistrationListView,
)

__all__ = ["CaptureView", "CheckoutView", "FeeQuoteView", "RegistrationListView"]
