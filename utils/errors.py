class RideShareError(Exception):
    """Base class for errors surfaced to the API and bot layers"""
    status_code = 500

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def serialize(self):
        payload = {"success": False, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(RideShareError):
    status_code = 400


class NotFoundError(RideShareError):
    status_code = 404


class CapacityError(RideShareError):
    status_code = 400


class PersistenceError(RideShareError):
    status_code = 500
