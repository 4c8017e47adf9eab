class RoomError(Exception):
    """A request the room rules refuse; `status` is the HTTP status to report."""

    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.message = message
        self.status = status

    def to_dict(self):
        return {'error': self.message}
