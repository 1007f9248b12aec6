from .rules import Rejection


class AuctionError(Exception):
    """Raised by the engine; views turn it into a JSON error response"""
    status_code = 400

    def __init__(self, message, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def as_payload(self):
        return {'error': self.message, **self.extra}


class RejectedError(AuctionError):
    def __init__(self, rejection: Rejection):
        super().__init__(rejection.message, **rejection.extra)
        self.code = rejection.code


class NotFoundError(AuctionError):
    status_code = 404
