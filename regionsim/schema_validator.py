"""
Dynamic JSON Schema Validator for scenario documents

This module provides JSON schema validation with dynamic name enums.
The schema template is loaded and every cross reference (a virus naming its
family, a vaccine naming its target, mobility edges naming regions, ...) is
restricted to the names actually declared in the scenario.
"""

import json
import os
from typing import Any, Dict, List, Optional, Tuple

import jsonschema
from jsonschema import ValidationError

# Placeholder -> scenario section holding the declared names
PLACEHOLDERS = {
    "{FAMILY_NAMES}": "families",
    "{VIRUS_NAMES}": "viruses",
    "{VACCINE_NAMES}": "vaccines",
    "{REGION_NAMES}": "regions",
}

REQUIRED_SECTIONS = ("families", "viruses", "regions")


class SchemaValidator:
    """
    Dynamic JSON schema validator for scenario documents.

    This class loads a schema template and generates schemas whose name
    enums match the entities declared in the scenario.
    """

    def __init__(self, schema_template_path: Optional[str] = None):
        """
        Initialize the schema validator.

        Args:
            schema_template_path: Path to the schema template JSON file.
                                If None, uses the template shipped with the package.
        """
        if schema_template_path is None:
            schema_template_path = os.path.join(
                os.path.dirname(__file__), "scenario_schema_template.json"
            )

        self.schema_template_path = os.path.abspath(schema_template_path)
        self._load_template()

    def _load_template(self):
        """Load the schema template from file."""
        try:
            with open(self.schema_template_path, "r", encoding="utf-8") as f:
                self.schema_template = json.load(f)
        except FileNotFoundError:
            raise FileNotFoundError(
                f"Schema template not found at: {self.schema_template_path}"
            )
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in schema template: {e}")

    def generate_schema(self, names: Dict[str, List[str]]) -> Dict[str, Any]:
        """
        Generate a complete schema with the declared names filled in.

        Args:
            names: Declared names per placeholder (as returned by
                ``extract_names``)

        Returns:
            Complete JSON schema with resolved name enums
        """
        schema_str = json.dumps(self.schema_template, indent=2)
        for placeholder in PLACEHOLDERS:
            schema_str = schema_str.replace(
                f'"{placeholder}"', json.dumps(list(names.get(placeholder, [])))
            )
        return json.loads(schema_str)

    def validate(self, config: Dict[str, Any], verbose: bool = True) -> List[str]:
        """
        Validate a scenario against the dynamic schema.

        Args:
            config: Scenario dictionary to validate
            verbose: Whether to print detailed error messages

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        try:
            names = self.extract_names(config)
            schema = self.generate_schema(names)
            jsonschema.validate(config, schema)
            errors.extend(self._duplicate_names(names))

            if verbose and not errors:
                print(
                    f"JSON Schema validation passed "
                    f"({len(names['{REGION_NAMES}'])} regions, "
                    f"{len(names['{VIRUS_NAMES}'])} viruses)"
                )

        except ValidationError as e:
            errors.append(self._format_validation_error(e))

        except ValueError as e:
            errors.append(f"Schema validation error: {str(e)}")

        if verbose:
            for error_msg in errors:
                print(f"JSON Schema validation failed: {error_msg}")

        return errors

    def extract_names(self, config: Dict[str, Any]) -> Dict[str, List[str]]:
        """
        Extract the declared entity names from a scenario.

        Args:
            config: Scenario dictionary

        Returns:
            Declared names per placeholder

        Raises:
            ValueError: If a required section is missing or malformed
        """
        if not isinstance(config, dict):
            raise ValueError("Invalid configuration structure")
        for section in REQUIRED_SECTIONS:
            if section not in config:
                raise ValueError(f"Missing required field: {section}")

        names = {}
        for placeholder, section in PLACEHOLDERS.items():
            entries = config.get(section, [])
            if not isinstance(entries, list):
                raise ValueError(f"{section} must be a list")
            names[placeholder] = [
                entry["name"]
                for entry in entries
                if isinstance(entry, dict) and isinstance(entry.get("name"), str)
            ]
        return names

    def _duplicate_names(self, names: Dict[str, List[str]]) -> List[str]:
        errors = []
        for placeholder, section in PLACEHOLDERS.items():
            seen = set()
            for name in names[placeholder]:
                if name in seen:
                    errors.append(f"Validation error at '{section}': duplicate name '{name}'")
                seen.add(name)
        return errors

    def _format_validation_error(self, error: ValidationError) -> str:
        """
        Format a JSON schema validation error into a readable message.

        Args:
            error: ValidationError from jsonschema

        Returns:
            Formatted error message
        """
        if error.absolute_path:
            path = ".".join(str(p) for p in error.absolute_path)
            return f"Validation error at '{path}': {error.message}"
        else:
            return f"Validation error: {error.message}"


class ScenarioSchemaValidator:
    """
    Convenience wrapper for scenario schema validation.
    """

    def __init__(self, schema_template_path: Optional[str] = None):
        self.validator = SchemaValidator(schema_template_path)

    def validate_config(self, config: Dict[str, Any], verbose: bool = True) -> bool:
        """
        Validate a scenario and raise exception if invalid.

        Raises:
            ValueError: If validation fails
        """
        errors = self.validator.validate(config, verbose)

        if errors:
            error_msg = f"Configuration validation failed with {len(errors)} error(s):\n"
            for i, err in enumerate(errors, 1):
                error_msg += f"  {i}. {err}\n"
            raise ValueError(error_msg.strip())

        return True

    def validate_config_safe(
        self, config: Dict[str, Any], verbose: bool = True
    ) -> Tuple[bool, List[str]]:
        """
        Validate a scenario without raising exceptions.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = self.validator.validate(config, verbose)
        return len(errors) == 0, errors

    def get_schema_for_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Generate the complete schema for a given scenario."""
        return self.validator.generate_schema(self.validator.extract_names(config))


def validate_scenario_config(config: Dict[str, Any], verbose: bool = True) -> bool:
    """
    Validate a scenario using JSON schema.

    Args:
        config: Scenario dictionary
        verbose: Whether to print validation messages

    Returns:
        True if valid

    Raises:
        ValueError: If validation fails
    """
    validator = ScenarioSchemaValidator()
    return validator.validate_config(config, verbose)


def validate_scenario_config_safe(
    config: Dict[str, Any], verbose: bool = True
) -> Tuple[bool, List[str]]:
    validator = ScenarioSchemaValidator()
    return validator.validate_config_safe(config, verbose)
