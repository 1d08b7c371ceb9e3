"""Validation of concrete configuration trees against the role schema."""

from element_roles.validation.configuration import (
    ISSUE_MISSING_REQUIRED,
    ISSUE_OUT_OF_ORDER,
    ISSUE_TOO_MANY,
    ISSUE_UNEXPECTED_CHILD,
    ISSUE_UNKNOWN_ROLE,
    ISSUE_WRONG_ROOT,
    NOTICE_REORDERABLE_SINGLETON,
    ConfigElement,
    ConfigurationDocumentError,
    ConfigurationIssue,
    ConfigurationReport,
    ConfigurationValidationError,
    assert_valid_configuration,
    load_configuration,
    validate_configuration,
)

__all__ = [
    "ConfigElement",
    "ConfigurationDocumentError",
    "ConfigurationIssue",
    "ConfigurationReport",
    "ConfigurationValidationError",
    "ISSUE_MISSING_REQUIRED",
    "ISSUE_OUT_OF_ORDER",
    "ISSUE_TOO_MANY",
    "ISSUE_UNEXPECTED_CHILD",
    "ISSUE_UNKNOWN_ROLE",
    "ISSUE_WRONG_ROOT",
    "NOTICE_REORDERABLE_SINGLETON",
    "assert_valid_configuration",
    "load_configuration",
    "validate_configuration",
]
