"""Exceptions raised by the model services and mapped to HTTP status codes by the routers."""


class ModelError(Exception):
    """Base class for model lifecycle failures."""


class InvalidModelNameError(ModelError, ValueError):
    """Model name is empty or not safe to use as a directory name."""


class InvalidUploadError(ModelError, ValueError):
    """Uploaded files or their contents are unusable (400)."""


class ModelNotFoundError(ModelError, LookupError):
    """Model, day or artifact does not exist (404)."""


class ModelExistsError(ModelError):
    """A model with the requested name already exists (409)."""


class TokensMissingError(ModelError):
    """Model has no readable token mapping (400)."""


class ModelProcessingError(ModelError):
    """Processing finished without producing anything usable (500)."""
