# core/exceptions.py
"""
Custom exceptions for the backend
"""
from enum import Enum
from typing import Any, Dict, List, Optional

class CropAdvisorError(Exception):
    """Base exception for the crop advisor backend"""
    pass

class ConfigurationError(CropAdvisorError):
    """Required configuration (API key) is missing"""
    pass

class ValidationError(CropAdvisorError):
    """Farm request is missing required fields or has invalid values"""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

class AgentError(CropAdvisorError):
    """Agent-related errors"""
    pass

class RequestCancelledError(CropAdvisorError):
    """Caller aborted the request through its cancel handle"""
    pass

class FailureKind(str, Enum):
    TRANSPORT = "transport"
    EXTRACTION = "extraction"
    SCHEMA = "schema"

class AttemptFailure(CropAdvisorError):
    """A single recommendation attempt failed; retryable"""
    kind: FailureKind = FailureKind.TRANSPORT

class CompletionFailure(AttemptFailure):
    """Transport error, non-success status or timeout from the text service"""
    kind = FailureKind.TRANSPORT

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

class ExtractionError(AttemptFailure):
    """No brace-delimited JSON span in the response text"""
    kind = FailureKind.EXTRACTION

class ParseError(AttemptFailure):
    """Brace-delimited span found but it is not valid JSON"""
    kind = FailureKind.EXTRACTION

class SchemaError(AttemptFailure):
    """Parsed JSON lacks the categories array"""
    kind = FailureKind.SCHEMA

class RetriesExhaustedError(AgentError):
    """Every attempt in the retry budget failed"""

    def __init__(self, last_failure: AttemptFailure, attempts: int):
        super().__init__(f"All {attempts} attempts failed; last error: {last_failure}")
        self.last_failure = last_failure
        self.attempts = attempts

    @property
    def kind(self) -> FailureKind:
        return self.last_failure.kind
