"""Django signals for price cache invalidation."""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from registrations.models import PriceTier
from registrations.services.pricing import invalidate_price_cache


@receiver([post_save, post_delete], sender=PriceTier)
def invalidate_price_tier_cache(sender, instance, **kwargs):
    """Invalidate the cached price table when a price tier is saved or deleted."""
    invalidate_price_cache()
