"""Serializers for request input and for domain models in API responses."""

from rest_framework import serializers

from registrations.domain import EntityId, EntityKind, EventKey, EventKind, NewEntity

EVENT_KIND_CHOICES = [kind.value for kind in EventKind]
ENTITY_KIND_CHOICES = [kind.value for kind in EntityKind]


class EventKeySerializer(serializers.Serializer):
    """Input shape of an event key."""

    kind = serializers.ChoiceField(choices=EVENT_KIND_CHOICES)
    name = serializers.CharField(max_length=255)
    year = serializers.IntegerField(min_value=1)
    sub_id = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")

    @staticmethod
    def to_event_key(data: dict) -> EventKey:
        return EventKey(
            kind=EventKind(data["kind"]),
            name=data["name"],
            year=data["year"],
            sub_id=data.get("sub_id", ""),
        )


class QuoteQuerySerializer(EventKeySerializer):
    tier = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    count = serializers.IntegerField(min_value=0, default=1)


class NewEntitySerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=ENTITY_KIND_CHOICES)
    name = serializers.CharField(max_length=255)
    owner = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    @staticmethod
    def to_domain(data: dict) -> NewEntity:
        return NewEntity(kind=EntityKind(data["kind"]), name=data["name"], owner=data["owner"])


class CheckoutRequestSerializer(serializers.Serializer):
    """POST /api/checkouts"""

    event = EventKeySerializer()
    tier = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    entity_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)
    new_entities = NewEntitySerializer(many=True, required=False, default=list)


class CaptureRequestSerializer(serializers.Serializer):
    """POST /api/checkouts/capture"""

    event = EventKeySerializer()
    tier = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    pending_entity_ids = serializers.ListField(
        child=serializers.UUIDField(), required=False, default=list
    )
    owned_entity_ids = serializers.ListField(
        child=serializers.UUIDField(), required=False, default=list
    )
    owner = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    token = serializers.CharField(max_length=255)
    payer_email = serializers.EmailField()


def to_entity_ids(values) -> list[EntityId]:
    return [EntityId(value) for value in values]


class EventKeyOutputSerializer(serializers.Serializer):
    kind = serializers.CharField(source="kind.value")
    name = serializers.CharField()
    year = serializers.IntegerField()
    sub_id = serializers.CharField()


class RegistrationRecordSerializer(serializers.Serializer):
    """Serializer for RegistrationRecord domain model."""

    entity_id = serializers.CharField()
    event = EventKeyOutputSerializer(source="event_key")
    status = serializers.CharField(source="status.value")
    created_at = serializers.DateTimeField()
    paid_at = serializers.DateTimeField(allow_null=True)
    amount_paid_minor_units = serializers.IntegerField(allow_null=True)
    payment_ref = serializers.CharField(allow_null=True)


class EntityOutcomeSerializer(serializers.Serializer):
    """Serializer for EntityOutcome domain model."""

    entity_id = serializers.CharField(allow_null=True)
    name = serializers.CharField()
    status = serializers.CharField(source="status.value")
    reason = serializers.CharField()


class RegistrationResultSerializer(serializers.Serializer):
    """Serializer for RegistrationResult domain model."""

    state = serializers.CharField(source="state.value")
    event = EventKeyOutputSerializer(source="event_key")
    tier = serializers.CharField()
    amount_due = serializers.IntegerField()
    currency = serializers.CharField()
    pending_entity_ids = serializers.ListField(child=serializers.CharField())
    created_entity_ids = serializers.ListField(child=serializers.CharField())
    records = RegistrationRecordSerializer(many=True)
    outcomes = EntityOutcomeSerializer(many=True)
    warnings = serializers.ListField(child=serializers.CharField())
