"""Validation failures reported to the client as ``{success: false, error}``."""


class CirculationError(Exception):
    """Base class for refused circulation requests."""

    message = "Request refused"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotLoggedIn(CirculationError):
    message = "User not logged in"


class InvalidSerial(CirculationError):
    message = "Invalid serial number"


class AlreadyCheckedOut(CirculationError):
    message = "That copy is already checked out"


class NotCheckedOutByYou(CirculationError):
    message = "This book isn't checked out by you"
