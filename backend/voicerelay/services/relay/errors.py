from typing import Any, Dict


class RelayError(Exception):
    """Base for failures the gateway reports back to the client."""

    status_code = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.message}


class MissingPayload(RelayError):
    """No usable audio data came with a record request."""


class InvalidTransition(RelayError):
    """The current turn status does not allow the attempted action."""

    def __init__(self, message: str, action: str, **context: Any):
        super().__init__(message, action=action, **context)
        self.action = action


class PersistenceFailure(RelayError):
    """Clip bytes or game state could not be written."""

    status_code = 500
