from registrations.stores.interfaces import EntityStore, PriceStore, RegistrationStore

__all__ = ["EntityStore", "PriceStore", "RegistrationStore"]
