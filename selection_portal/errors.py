# domain errors raised by the registry
from typing import Optional

EMPTY_NAME = "EMPTY_NAME"
TOO_SHORT = "TOO_SHORT"


class RegistryError(Exception):
    """
    Base class for every rejection the registry can produce.
    A raised RegistryError always leaves the registry unchanged.
    """
    code = "REGISTRY_ERROR"


class NameValidationError(RegistryError):
    code = "INVALID_NAME"

    def __init__(self, reason: str):
        self.reason = reason
        if reason == EMPTY_NAME:
            msg = "Please enter your name to continue."
        else:
            msg = "Name must be at least 2 characters long."
        super().__init__(msg)


class NoActiveSession(RegistryError):
    code = "NO_SESSION"

    def __init__(self, msg: str = "No participant session is active"):
        super().__init__(msg)


class UnknownOption(RegistryError):
    code = "UNKNOWN_OPTION"

    def __init__(self, option_id: str):
        self.option_id = option_id
        super().__init__(f"Unknown option: {option_id}")


class AlreadySelected(RegistryError):
    code = "ALREADY_SELECTED"

    def __init__(self, participant: str, option_id: Optional[str]):
        self.participant = participant
        self.option_id = option_id
        super().__init__(f"{participant} already selected {option_id}")


class OptionFull(RegistryError):
    code = "OPTION_FULL"

    def __init__(self, option_id: str):
        self.option_id = option_id
        super().__init__(f"{option_id} has reached its capacity")


class SnapshotError(RegistryError):
    code = "BAD_SNAPSHOT"
