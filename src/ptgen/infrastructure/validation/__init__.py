from .request_validator import RequestValidator, ValidationResult, is_malicious

__all__ = ["RequestValidator", "ValidationResult", "is_malicious"]
