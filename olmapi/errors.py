"""Validation results: errors and warnings found in operator manifests."""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any


class Level(str, Enum):
    """Severity of a validation error."""

    WARN = "Warning"
    ERROR = "Error"

    def __str__(self) -> str:
        return self.value


class ErrorType(str, Enum):
    """What a validation error resulted from."""

    INVALID_CSV = "CSVFileNotValid"
    FIELD_MISSING = "FieldNotFound"
    UNSUPPORTED_TYPE = "FieldTypeNotSupported"
    INVALID_PARSE = "ParseError"
    IO = "FileReadError"
    FAILED_VALIDATION = "ValidationFailed"
    INVALID_OPERATION = "OperationFailed"
    INVALID_MANIFEST_STRUCTURE = "ManifestStructureNotValid"
    INVALID_BUNDLE = "BundleNotValid"
    INVALID_PACKAGE_MANIFEST = "PackageManifestNotValid"
    OBJECT_FAILED_VALIDATION = "ObjectFailedValidation"
    PROPERTIES_ANNOTATION_USED = "PropertiesAnnotationUsed"

    def __str__(self) -> str:
        return self.value


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class ValidationError(Exception):
    """A warning or an error found in a manifest."""

    error_type: ErrorType
    level: Level
    field: str = ""
    bad_value: Any = None
    detail: str = ""

    def __str__(self) -> str:
        detail = f": {self.detail}" if self.detail else ""
        if self.field and self.bad_value is not None:
            detail = f"Field {self.field}, Value {_format_value(self.bad_value)}{detail}"
        elif self.field:
            detail = f"Field {self.field}{detail}"
        elif self.bad_value is not None:
            detail = f"Value {_format_value(self.bad_value)}{detail}"
        if detail:
            return f"{self.level}: {detail}"
        return "ErrMessageMissing"


@dataclass
class ManifestResult:
    """Errors and warnings collected for one manifest."""

    name: str = ""
    errors: list[ValidationError] = dataclass_field(default_factory=list)
    warnings: list[ValidationError] = dataclass_field(default_factory=list)

    def add(self, *args: ValidationError) -> None:
        """Sort each given error into errors or warnings by its level."""
        for err in args:
            if err.level == Level.ERROR:
                self.errors.append(err)
            else:
                self.warnings.append(err)

    def has_error(self) -> bool:
        return bool(self.errors)

    def has_warn(self) -> bool:
        return bool(self.warnings)


def new_error(error_type: ErrorType, detail: str, field: str, value: Any) -> ValidationError:
    return ValidationError(error_type, Level.ERROR, field, value, detail)


def new_warn(error_type: ErrorType, detail: str, field: str, value: Any) -> ValidationError:
    return ValidationError(error_type, Level.WARN, field, value, detail)


def err_invalid_bundle(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.INVALID_BUNDLE, Level.ERROR, "", value, detail)


def warn_invalid_bundle(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.INVALID_BUNDLE, Level.WARN, "", value, detail)


def err_invalid_manifest_structure(detail: str) -> ValidationError:
    return ValidationError(ErrorType.INVALID_MANIFEST_STRUCTURE, Level.ERROR, "", "", detail)


def warn_invalid_manifest_structure(detail: str) -> ValidationError:
    return ValidationError(ErrorType.INVALID_MANIFEST_STRUCTURE, Level.WARN, "", "", detail)


def _invalid_csv(level: Level, detail: str, csv_name: str) -> ValidationError:
    return ValidationError(ErrorType.INVALID_CSV, level, "", "", f"({csv_name}) {detail}")


def err_invalid_csv(detail: str, csv_name: str) -> ValidationError:
    return _invalid_csv(Level.ERROR, detail, csv_name)


def warn_invalid_csv(detail: str, csv_name: str) -> ValidationError:
    return _invalid_csv(Level.WARN, detail, csv_name)


def err_field_missing(detail: str, field: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.FIELD_MISSING, Level.ERROR, field, value, detail)


def warn_field_missing(detail: str, field: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.FIELD_MISSING, Level.WARN, field, value, detail)


def err_unsupported_type(detail: str) -> ValidationError:
    return ValidationError(ErrorType.UNSUPPORTED_TYPE, Level.ERROR, "", "", detail)


def warn_unsupported_type(detail: str) -> ValidationError:
    return ValidationError(ErrorType.UNSUPPORTED_TYPE, Level.WARN, "", "", detail)


def err_invalid_parse(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.INVALID_PARSE, Level.ERROR, "", value, detail)


def warn_invalid_parse(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.INVALID_PARSE, Level.WARN, "", value, detail)


def _invalid_package_manifest(level: Level, detail: str, pkg_name: str) -> ValidationError:
    return ValidationError(
        ErrorType.INVALID_PACKAGE_MANIFEST, level, "", "", f"({pkg_name}) {detail}"
    )


def err_invalid_package_manifest(detail: str, pkg_name: str) -> ValidationError:
    return _invalid_package_manifest(Level.ERROR, detail, pkg_name)


def warn_invalid_package_manifest(detail: str, pkg_name: str) -> ValidationError:
    return _invalid_package_manifest(Level.WARN, detail, pkg_name)


def err_io_error(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.IO, Level.ERROR, "", value, detail)


def warn_io_error(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.IO, Level.WARN, "", value, detail)


def err_failed_validation(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.FAILED_VALIDATION, Level.ERROR, "", value, detail)


def warn_failed_validation(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.FAILED_VALIDATION, Level.WARN, "", value, detail)


def err_invalid_operation(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.INVALID_OPERATION, Level.ERROR, "", value, detail)


def warn_invalid_operation(detail: str, value: Any) -> ValidationError:
    return ValidationError(ErrorType.INVALID_OPERATION, Level.WARN, "", value, detail)


def err_invalid_object(value: Any, detail: str) -> ValidationError:
    return ValidationError(ErrorType.OBJECT_FAILED_VALIDATION, Level.ERROR, "", value, detail)


def warn_invalid_object(detail: str, value: Any) -> ValidationError:
    # Warnings about objects are reported as failed validations.
    return warn_failed_validation(detail, value)


def warn_properties_annotation_used(detail: str) -> ValidationError:
    return ValidationError(ErrorType.PROPERTIES_ANNOTATION_USED, Level.WARN, "", "", detail)