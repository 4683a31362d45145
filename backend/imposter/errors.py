"""Error taxonomy shared by the game services and the HTTP layer.

Services raise these; the app factory renders them as
``{"error": message, "kind": kind}`` with the matching status code.
"""


class GameError(Exception):
    kind = 'GameError'
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message, 'kind': self.kind}


class NotFoundError(GameError):
    kind = 'NotFound'
    status_code = 404


class InvalidStateError(GameError):
    kind = 'InvalidState'
    status_code = 400


class ForbiddenError(GameError):
    kind = 'Forbidden'
    status_code = 403


class CapacityError(GameError):
    kind = 'Capacity'
    status_code = 400


class LobbyFullError(CapacityError):
    kind = 'Full'


class NotEnoughPlayersError(CapacityError):
    kind = 'NotEnoughPlayers'


class ValidationError(GameError):
    kind = 'ValidationError'
    status_code = 400


class UnavailableError(GameError):
    kind = 'Unavailable'
    status_code = 503
