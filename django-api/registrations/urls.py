from django.urls import path

from registrations.handlers import CaptureView, CheckoutView, FeeQuoteView, RegistrationListView

urlpatterns = [
    path("fees/quote", FeeQuoteView.as_view(), name="fee-quote"),
    path("registrations", RegistrationListView.as_view(), name="registration-list"),
    path("checkouts", CheckoutView.as_view(), name="checkout"),
    path("checkouts/capture", CaptureView.as_view(), name="checkout-capture"),
]
