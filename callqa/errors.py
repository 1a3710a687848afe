"""Error taxonomy for the call pipeline and its provider clients."""


class PipelineError(Exception):
    """Fatal pipeline failure reported to the caller."""

    status_code = 500


class NotFound(PipelineError):
    status_code = 404


class MissingAudio(PipelineError):
    pass


class InvalidAudioReference(PipelineError):
    pass


class StorageError(PipelineError):
    pass


class QualityScoreInsertFailed(PipelineError):
    pass


class ConcurrentRunError(PipelineError):
    """The call was modified by another run (usually a retry) since this run loaded it."""

    status_code = 409


class ProviderError(Exception):
    """Transcription provider failure. Recovered by placeholder substitution."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class QualityAnalysisError(Exception):
    """Base for classified language-model failures."""

    retryable = False

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class InvalidInput(QualityAnalysisError):
    pass


class RateLimited(QualityAnalysisError):
    retryable = True


class ProviderUnavailable(QualityAnalysisError):
    retryable = True


class AuthError(QualityAnalysisError):
    pass


class ProviderRejected(QualityAnalysisError):
    pass


class AnalysisFailed(QualityAnalysisError):
    """Malformed or incomplete JSON from the model."""

    retryable = True
