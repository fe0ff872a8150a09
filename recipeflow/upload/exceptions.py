"""
Simple exceptions for upload functionality.
"""


class RecipeFlowUploadError(Exception):
    """Base upload error."""

    def __init__(self, message, **kwargs):
        super().__init__(message)
        self.message = message


class EnvironmentValidationError(RecipeFlowUploadError):
    """Upload configuration is missing or invalid."""

    def __init__(self, message, **kwargs):
        super().__init__(message)
        self.missing_vars = kwargs.get('missing_vars', [])


class UploadProtocolError(RecipeFlowUploadError):
    """Server answered a protocol step with a non-2xx status or an unusable body."""

    def __init__(self, message, **kwargs):
        super().__init__(message)
        self.phase = kwargs.get('phase')
        self.status_code = kwargs.get('status_code')
        self.response_body = kwargs.get('response_body')


class ArchiveError(RecipeFlowUploadError):
    """Icon archive could not be built."""
    pass
