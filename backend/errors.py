# backend/errors.py


class GenerationError(Exception):
    """Lỗi gốc cho mọi thao tác generate / edit / video."""

    status_code = 502


class MissingCredential(GenerationError):
    status_code = 401

    def __init__(self, message: str = "Please enter your Gemini API Key at the top of the page."):
        super().__init__(message)


class MissingSourceImage(GenerationError):
    status_code = 400

    def __init__(self, message: str = "Please upload a source image first"):
        super().__init__(message)


class InvalidSourceImage(GenerationError):
    """Có ảnh gốc nhưng dữ liệu không decode được."""

    status_code = 400

    def __init__(self, message: str = "Source image is not valid base64 data"):
        super().__init__(message)


class InvalidPrompt(GenerationError):
    status_code = 400

    def __init__(self, message: str = "Prompt must not be empty"):
        super().__init__(message)


class RemoteCallFailure(GenerationError):
    pass


class NoPayloadInResponse(GenerationError):
    pass


class JobFailure(GenerationError):
    pass
