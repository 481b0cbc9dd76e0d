"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models


class EntityKindChoices(models.TextChoices):
    PLAYER = "player", "Player"
    TEAM = "team", "Team"


class EventKindChoices(models.TextChoices):
    SEASON = "season", "Season"
    TRYOUT = "tryout", "Tryout"
    TOURNAMENT = "tournament", "Tournament"


class StatusChoices(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"


class Participant(models.Model):
    """Persistence model for players and teams."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kind = models.CharField(max_length=10, choices=EntityKindChoices.choices)
    name = models.CharField(max_length=255)
    owner = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["owner"], name="participant_owner_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.kind})"


class Registration(models.Model):
    """One ledger row per (participant, event)."""

    id = models.BigAutoField(primary_key=True)
    entity_id = models.UUIDField()
    event_kind = models.CharField(max_length=12, choices=EventKindChoices.choices)
    event_name = models.CharField(max_length=255)
    event_year = models.PositiveIntegerField()
    event_sub_id = models.CharField(max_length=100, blank=True, default="")
    status = models.CharField(
        max_length=10, choices=StatusChoices.choices, default=StatusChoices.PENDING
    )
    created_at = models.DateTimeField()
    paid_at = models.DateTimeField(blank=True, null=True)
    amount_paid_minor_units = models.PositiveIntegerField(blank=True, null=True)
    payment_ref = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["entity_id", "event_kind", "event_name", "event_year", "event_sub_id"],
                name="unique_registration_per_entity_event",
            ),
        ]
        indexes = [
            models.Index(
                fields=["event_kind", "event_name", "event_year", "event_sub_id"],
                name="registration_event_idx",
            ),
            models.Index(fields=["payment_ref"], name="registration_payment_ref_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.entity_id} - {self.event_kind} {self.event_name} {self.event_year} ({self.status})"


class PriceTier(models.Model):
    """Admin-managed per-entity price for an event kind and tier."""

    id = models.BigAutoField(primary_key=True)
    event_kind = models.CharField(max_length=12, choices=EventKindChoices.choices)
    tier = models.CharField(max_length=50)
    amount_minor_units = models.PositiveIntegerField()
    position = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["event_kind", "position", "id"]
        constraints = [
            models.UniqueConstraint(fields=["event_kind", "tier"], name="unique_price_tier"),
        ]

    def __str__(self) -> str:
        return f"{self.event_kind} {self.tier} - {self.amount_minor_units}"
