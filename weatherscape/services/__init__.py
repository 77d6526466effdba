from weatherscape.services.background import BackgroundService, create_background_service

__all__ = ["BackgroundService", "create_background_service"]
