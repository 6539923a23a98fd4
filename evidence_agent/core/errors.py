"""
Application errors surfaced to callers of the pipeline.

ServiceUnavailableError marks a backend the agent cannot run without (chat
model, embeddings) that is not configured; the API maps it to 503.
InvalidRequestError marks bad caller input (blank question, missing session
id); the API maps it to 400.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required backend (e.g. chat model, embeddings API) is not configured."""

    def __init__(self, service: str, message: str) -> None:
        self.service = service
        self.message = message
        super().__init__(f"{service}: {message}")


class InvalidRequestError(ValueError):
    """Raised when caller input cannot be processed (e.g. blank question)."""
