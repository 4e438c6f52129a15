class InvalidAction(Exception):
    """Raised when a player action fails validation.

    Nothing has been mutated when this is raised. ``kind`` is one of the
    categories below and ``message`` is safe to show to the acting player.
    """

    SESSION = 'session'
    TURN = 'turn'
    RESOURCE = 'resource'
    PLACEMENT = 'placement'
    ACTION_USED = 'action_used'

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
