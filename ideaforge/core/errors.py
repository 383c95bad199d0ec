"""
Error taxonomy for IdeaForge.
Each error maps to one HTTP status in the API layer; background stage runs
record them in the run log instead.
"""


class IdeaForgeError(Exception):
    """Base class for all service errors."""

    status_code = 500


class NotFound(IdeaForgeError):
    """Referenced project or run does not exist."""

    status_code = 404


class InvalidRequest(IdeaForgeError):
    """Unknown stage, non-runnable stage or illegal run transition."""

    status_code = 400


class PrerequisiteMissing(IdeaForgeError):
    """A stage's upstream artifact is absent."""

    status_code = 409

    def __init__(self, stage: str, missing: list):
        self.stage = stage
        self.missing = list(missing)
        super().__init__(
            f"Cannot run {stage}: missing prerequisite artifact(s) {', '.join(self.missing)}"
        )


class GenerationFailure(IdeaForgeError):
    """The hosted model returned no usable output."""

    status_code = 502


class PersistenceFailure(IdeaForgeError):
    """Document store read or write failed."""

    status_code = 503
