"""Validation engine for inputs checked before any network call"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from ..api.exceptions import ValidationError
from ..constants import PROJECT_NAME_PATTERN, MAX_PROJECT_NAME_LENGTH
from ..models.upload import UploadPayloadItem


@dataclass
class ValidationResult:
    """Validation result container"""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add error message"""
        self.errors.append(message)
        self.is_valid = False

    def raise_if_invalid(self) -> None:
        """Raise the first error as a ValidationError"""
        if not self.is_valid:
            raise ValidationError(self.errors[0])

    def __str__(self) -> str:
        if self.is_valid:
            return "✓ All validations passed"
        return '\n'.join(f"  ✗ {error}" for error in self.errors)


class ValidationEngine:
    """Execute various validation operations"""

    def validate_project_name(self, name: Any) -> ValidationResult:
        """
        Validate a Pages project name

        Lowercase letters, digits and hyphens; 1-58 characters; no
        leading or trailing hyphen.

        Args:
            name: Project name to validate

        Returns:
            ValidationResult
        """
        result = ValidationResult()

        if not isinstance(name, str) or not name:
            result.add_error("Project name is required")
            return result

        if len(name) > MAX_PROJECT_NAME_LENGTH:
            result.add_error(
                f"Project name must be between 1 and {MAX_PROJECT_NAME_LENGTH} characters"
            )
            return result

        if not PROJECT_NAME_PATTERN.match(name):
            result.add_error(
                f"Invalid project name '{name}': only lowercase letters, numbers, "
                "and hyphens are allowed, and it cannot start or end with a hyphen"
            )

        return result

    def validate_fingerprints(self, fingerprints: Any) -> ValidationResult:
        """Non-empty list of non-empty strings"""
        result = ValidationResult()

        if not isinstance(fingerprints, (list, tuple)):
            result.add_error("Fingerprints must be a list")
            return result

        if not fingerprints:
            result.add_error("At least one fingerprint is required")
            return result

        for fingerprint in fingerprints:
            if not isinstance(fingerprint, str) or not fingerprint.strip():
                result.add_error("All fingerprints must be non-empty strings")
                break

        return result

    def validate_payload(self, payload: Sequence[UploadPayloadItem]) -> ValidationResult:
        """Every upload item needs key, value and content type"""
        result = ValidationResult()

        if not payload:
            result.add_error("At least one upload payload is required")
            return result

        for item in payload:
            if not isinstance(item.key, str) or not item.key.strip():
                result.add_error("Payload item key must be a non-empty string")
            elif not isinstance(item.value, str) or not item.value.strip():
                result.add_error(f"Payload item value must be a non-empty string (key {item.key})")
            elif not isinstance(item.content_type, str) or not item.content_type.strip():
                result.add_error(f"Payload item content type must be a non-empty string (key {item.key})")
            elif item.base64 is not True:
                result.add_error(f"Payload item must be base64 encoded (key {item.key})")

        return result

    def validate_manifest(self, manifest: Dict[str, str]) -> ValidationResult:
        """Non-empty path -> fingerprint mapping with string values"""
        result = ValidationResult()

        if not isinstance(manifest, dict) or not manifest:
            result.add_error("Manifest is required and cannot be empty")
            return result

        for path, fingerprint in manifest.items():
            if not isinstance(path, str) or not path.strip('/'):
                result.add_error(f"Invalid manifest path: {path!r}")
                break
            if not isinstance(fingerprint, str) or not fingerprint:
                result.add_error(f"Invalid fingerprint for manifest path {path}")
                break

        return result


_engine = ValidationEngine()


def validate_project_name(name: Any) -> str:
    """Validate a project name, raising ValidationError"""
    _engine.validate_project_name(name).raise_if_invalid()
    return name
