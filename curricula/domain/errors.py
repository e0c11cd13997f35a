from __future__ import annotations


class DomainError(Exception):
    pass


class DomainValidationError(DomainError):
    pass


class DomainInvariantError(DomainError):
    pass


class DomainDependencyError(DomainError):
    pass


class ConfigurationError(DomainValidationError):
    pass


class DocumentNotFoundError(DomainValidationError):
    def __init__(self, path: str) -> None:
        super().__init__(f"file not found: {path}")
        self.path = path


class DecodeFailure(DomainDependencyError):
    pass


class ExtractionFailed(DecodeFailure):
    def __init__(self, document_id: str, reason: str) -> None:
        super().__init__(f"{document_id}: {reason}")
        self.document_id = document_id
        self.reason = reason


class GenerativeCallFailure(DomainDependencyError):
    pass
