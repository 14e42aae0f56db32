"""Validation utilities for value trees and document text."""

import json
import math
from typing import Any, List, Set, Tuple

import yaml

from ..types import DocumentFormat, ErrorType, ValidationError, ValidationResult
from .yaml_support import load_yaml


MAX_RECOMMENDED_DEPTH = 20


class ValidationUtils:
    """Utility class for validating documents and value trees."""

    @staticmethod
    def validate_document(text: str, fmt: DocumentFormat) -> ValidationResult:
        """
        Validate document text syntax and structure.

        Args:
            text: JSON or YAML text to validate
            fmt: Format of the text

        Returns:
            ValidationResult with validation details
        """
        errors = []
        warnings = []

        if not text.strip():
            errors.append(ValidationError(
                type=ErrorType.SYNTAX,
                message=f"{fmt.value.upper()} document is empty",
                location="input"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        if fmt == DocumentFormat.JSON:
            try:
                json.loads(text)
            except json.JSONDecodeError as e:
                errors.append(ValidationError(
                    type=ErrorType.SYNTAX,
                    message=f"Invalid JSON syntax: {e.msg}",
                    location=f"line {e.lineno}, column {e.colno}"
                ))
        else:
            try:
                load_yaml(text)
            except yaml.YAMLError as e:
                mark = getattr(e, "problem_mark", None)
                location = f"line {mark.line + 1}, column {mark.column + 1}" if mark else None
                errors.append(ValidationError(
                    type=ErrorType.SYNTAX,
                    message=f"Invalid YAML syntax: {getattr(e, 'problem', None) or e}",
                    location=location
                ))

        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)

    @staticmethod
    def validate_value(data: Any) -> ValidationResult:
        """
        Validate that a parsed value is an exportable tree.

        The root must be an object or array, keys must be strings without
        null bytes, numbers must be finite, and the tree must be acyclic.
        """
        errors: List[ValidationError] = []
        warnings: List[str] = []

        if not isinstance(data, (dict, list)):
            errors.append(ValidationError(
                type=ErrorType.STRUCTURE,
                message=f"Root element must be an object or array, got {type(data).__name__}",
                location="root"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        max_depth = ValidationUtils._check_node(data, "$", 0, set(), errors)
        if max_depth > MAX_RECOMMENDED_DEPTH:
            warnings.append(f"Deep nesting detected (depth: {max_depth}). "
                            f"Outline levels beyond 7 are not grouped in spreadsheet tools.")

        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)

    @staticmethod
    def _check_node(data: Any, location: str, depth: int, seen: Set[int],
                    errors: List[ValidationError]) -> int:
        """Recursively check a node; returns the maximum depth below it."""
        if data is None or isinstance(data, (bool, str)):
            return depth

        if isinstance(data, (int, float)):
            if isinstance(data, float) and not math.isfinite(data):
                errors.append(ValidationError(
                    type=ErrorType.STRUCTURE,
                    message=f"Non-finite number {data!r} cannot be exported",
                    location=location
                ))
            return depth

        if not isinstance(data, (dict, list)):
            errors.append(ValidationError(
                type=ErrorType.STRUCTURE,
                message=f"Unsupported value type {type(data).__name__}",
                location=location
            ))
            return depth

        obj_id = id(data)
        if obj_id in seen:
            errors.append(ValidationError(
                type=ErrorType.STRUCTURE,
                message="Circular references detected in value tree",
                location=location
            ))
            return depth
        seen.add(obj_id)

        max_depth = depth
        for key, child in ValidationUtils._children(data, location, errors):
            max_depth = max(max_depth, ValidationUtils._check_node(child, key, depth + 1, seen, errors))

        seen.remove(obj_id)
        return max_depth

    @staticmethod
    def _children(data: Any, location: str, errors: List[ValidationError]) -> List[Tuple[str, Any]]:
        """List children with their display locations, checking object keys."""
        if isinstance(data, list):
            return [(f"{location}[{i}]", item) for i, item in enumerate(data)]

        children = []
        for key, value in data.items():
            if not isinstance(key, str):
                errors.append(ValidationError(
                    type=ErrorType.STRUCTURE,
                    message=f"Object keys must be strings, got {type(key).__name__} {key!r}",
                    location=location
                ))
                continue
            if "\x00" in key:
                errors.append(ValidationError(
                    type=ErrorType.STRUCTURE,
                    message="Object keys cannot contain null bytes",
                    location=location
                ))
                continue
            children.append((f"{location}.{key}", value))
        return children
