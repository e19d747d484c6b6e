"""
Error taxonomy for the extraction, meal-planning and grocery pipelines.

Every error carries the HTTP status and label used when it escapes to a
caller; the FastAPI handler in ``reelchef.main`` renders them as
``{"error": label, "message": text}``.
"""


class ReelChefError(Exception):
    status_code: int = 500
    error: str = "InternalError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or self.error)
        self.message = str(self.args[0])


class ValidationError(ReelChefError):
    """Malformed input."""
    status_code = 400
    error = "ValidationError"


class NotFoundError(ReelChefError):
    """The requested resource does not exist."""
    status_code = 404
    error = "NotFoundError"


class UnsupportedPlatformError(ReelChefError):
    """Unsupported platform."""
    status_code = 400
    error = "UnsupportedPlatformError"


class UpstreamFetchError(ReelChefError):
    """An upstream service returned a failure."""
    status_code = 502
    error = "UpstreamFetchError"


class ExtractionParseError(ReelChefError):
    """The recipe could not be extracted from the transcript."""
    status_code = 502
    error = "ExtractionParseError"


class PersistenceConflict(ReelChefError):
    """A recipe with this fingerprint already exists."""
    status_code = 409
    error = "PersistenceConflict"

    def __init__(self, url_hash: str):
        super().__init__(f"Recipe with url_hash {url_hash} already exists")
        self.url_hash = url_hash


class OptimizationDegraded(ReelChefError):
    """Meal plan optimization failed; the draft plan is used instead."""
    error = "OptimizationDegraded"


class DraftGenerationError(ReelChefError):
    """Failed to generate meal plan."""
    status_code = 502
    error = "DraftGenerationError"


class RecipesNotFoundError(ReelChefError):
    """The specified recipe IDs do not exist."""
    status_code = 404
    error = "RecipesNotFoundError"


class NoMatchingRecipesError(ReelChefError):
    """No recipes match your preferences."""
    status_code = 400
    error = "NoMatchingRecipesError"


class SmartMergeError(ReelChefError):
    """Failed to optimize grocery list."""
    status_code = 502
    error = "SmartMergeError"


class ResponseDecodeError(Exception):
    """A reasoning-service response failed JSON decoding or schema validation."""
