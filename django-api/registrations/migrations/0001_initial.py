import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Participant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("kind", models.CharField(choices=[("player", "Player"), ("team", "Team")], max_length=10)),
                ("name", models.CharField(max_length=255)),
                ("owner", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [models.Index(fields=["owner"], name="participant_owner_idx")],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("entity_id", models.UUIDField()),
                (
                    "event_kind",
                    models.CharField(
                        choices=[("season", "Season"), ("tryout", "Tryout"), ("tournament", "Tournament")],
                        max_length=12,
                    ),
                ),
                ("event_name", models.CharField(max_length=255)),
                ("event_year", models.PositiveIntegerField()),
                ("event_sub_id", models.CharField(blank=True, default="", max_length=100)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("paid", "Paid")], default="pending", max_length=10
                    ),
                ),
                ("created_at", models.DateTimeField()),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("amount_paid_minor_units", models.PositiveIntegerField(blank=True, null=True)),
                ("payment_ref", models.CharField(blank=True, max_length=255, null=True)),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["event_kind", "event_name", "event_year", "event_sub_id"],
                        name="registration_event_idx",
                    ),
                    models.Index(fields=["payment_ref"], name="registration_payment_ref_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("entity_id", "event_kind", "event_name", "event_year", "event_sub_id"),
                        name="unique_registration_per_entity_event",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="PriceTier",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "event_kind",
                    models.CharField(
                        choices=[("season", "Season"), ("tryout", "Tryout"), ("tournament", "Tournament")],
                        max_length=12,
                    ),
                ),
                ("tier", models.CharField(max_length=50)),
                ("amount_minor_units", models.PositiveIntegerField()),
                ("position", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["event_kind", "position", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("event_kind", "tier"), name="unique_price_tier")
                ],
            },
        ),
    ]
