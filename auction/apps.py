from django.apps import AppConfig


class AuctionConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'auction'
    verbose_name = 'Live Auction'

    engine = None

    def ready(self):
        from .engine import AuctionEngine

        # One engine for the whole process; views reach it through the app config
        self.engine = AuctionEngine()
