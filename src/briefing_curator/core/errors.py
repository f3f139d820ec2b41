"""Error taxonomy for the curation core."""


class BriefingCuratorError(Exception):
    """Base class for all briefing curator errors."""


class ValidationError(BriefingCuratorError, ValueError):
    """Malformed input shape. Fatal to the single call."""


class UpstreamUnavailable(BriefingCuratorError):
    """A collaborator query failed (storage, history, alert log)."""
    
    def __init__(self, collaborator: str, detail: str = "") -> None:
        self.collaborator = collaborator
        self.detail = detail
        message = f"{collaborator} unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
