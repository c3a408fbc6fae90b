"""Domain errors raised by the secret santa services."""


class SecretSantaError(Exception):
    """Base class for all domain errors."""


class ParticipantNotFoundError(SecretSantaError):
    """Participant record is missing when it was expected to exist."""

    def __init__(self, participant_id: int):
        super().__init__(f"Participant {participant_id} not found")
        self.participant_id = participant_id


class UnauthorizedError(SecretSantaError):
    """Caller is not on the admin allow-list."""


class AssignmentError(SecretSantaError):
    """Base class for recipient assignment failures."""


class AlreadyAssignedError(AssignmentError):
    """Requester already has a recipient."""


class NoCandidateAvailableError(AssignmentError):
    """Nobody is left to be claimed as a recipient."""


class ConcurrentAssignmentConflictError(AssignmentError):
    """Chosen candidate was claimed by someone else in the meantime."""
