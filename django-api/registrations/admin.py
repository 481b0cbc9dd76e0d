from django.contrib import admin

from registrations.models import Participant, PriceTier, Registration


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ["name", "kind", "owner", "created_at"]
    list_filter = ["kind"]
    search_fields = ["name", "owner"]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = [
        "entity_id",
        "event_kind",
        "event_name",
        "event_year",
        "status",
        "amount_paid_minor_units",
        "paid_at",
    ]
    list_filter = ["event_kind", "event_year", "status"]
    search_fields = ["entity_id", "event_name", "payment_ref"]
    readonly_fields = ["status", "paid_at", "amount_paid_minor_units", "payment_ref", "created_at"]


@admin.register(PriceTier)
class PriceTierAdmin(admin.ModelAdmin):
    list_display = ["event_kind", "tier", "amount_minor_units", "position"]
    list_filter = ["event_kind"]
