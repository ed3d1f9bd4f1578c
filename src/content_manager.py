"""
Content Manager for Starship Saboteur

Handles loading and validation of the YAML file containing the display text
shown to players: role objectives, random event messages and secret action
messages.
"""

import yaml
from typing import Dict, Any, Type
from dataclasses import dataclass, field
from enum import Enum
import logging

from src.core.ship import Role, SecretAction, RANDOM_EVENT_KINDS, EventKind

logger = logging.getLogger(__name__)


@dataclass
class ShipContent:
    """Validated display text keyed by enum member."""
    objectives: Dict[Role, str] = field(default_factory=dict)
    events: Dict[EventKind, str] = field(default_factory=dict)
    secret_actions: Dict[SecretAction, str] = field(default_factory=dict)


class ContentValidationError(Exception):
    """Raised when YAML content validation fails."""
    pass


class ContentManager:
    """Manages loading and validation of game content from YAML files."""

    FALLBACK_OBJECTIVE = "Complete your secret mission!"

    def __init__(self, yaml_file_path: str = "ship_content.yaml"):
        """
        Initialize ContentManager with path to YAML file.

        Args:
            yaml_file_path: Path to the YAML file containing the display text
        """
        self.yaml_file_path = yaml_file_path
        self.content = ShipContent()
        self._loaded = False

    def load_content_from_yaml(self) -> None:
        """
        Load display text from the YAML file.

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ContentValidationError: If YAML structure is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        try:
            with open(self.yaml_file_path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file)

            self.validate_yaml_structure(data)
            self.content = self._parse_content(data)
            self._loaded = True
            logger.info(f"Successfully loaded ship content from {self.yaml_file_path}")

        except FileNotFoundError:
            logger.error(f"YAML file not found: {self.yaml_file_path}")
            raise
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}")
            raise
        except ContentValidationError as e:
            logger.error(f"Content validation error: {e}")
            raise

    def validate_yaml_structure(self, data: Any) -> None:
        """
        Validate the structure of loaded YAML data.

        Every role, random event kind and secret action needs a non-empty entry.

        Args:
            data: Parsed YAML data to validate

        Raises:
            ContentValidationError: If structure is invalid
        """
        if not isinstance(data, dict):
            raise ContentValidationError("YAML root must be a dictionary")

        self._validate_section(data, 'objectives', [role.value for role in Role])
        self._validate_section(data, 'events', [kind.value for kind in RANDOM_EVENT_KINDS])
        self._validate_section(data, 'secret_actions', [action.value for action in SecretAction])

    def _validate_section(self, data: Dict[str, Any], section: str, required_keys) -> None:
        if section not in data:
            raise ContentValidationError(f"YAML must contain '{section}' key")

        entries = data[section]
        if not isinstance(entries, dict):
            raise ContentValidationError(f"'{section}' must be a dictionary")

        missing = [key for key in required_keys if key not in entries]
        if missing:
            raise ContentValidationError(f"'{section}' missing entries for: {missing}")

        for key in required_keys:
            text = entries[key]
            if not isinstance(text, str):
                raise ContentValidationError(f"'{section}.{key}' must be a string")
            if not text.strip():
                raise ContentValidationError(f"'{section}.{key}' cannot be empty")

    def _parse_content(self, data: Dict[str, Any]) -> ShipContent:
        return ShipContent(
            objectives=self._parse_section(data['objectives'], Role),
            events={kind: data['events'][kind.value].strip() for kind in RANDOM_EVENT_KINDS},
            secret_actions=self._parse_section(data['secret_actions'], SecretAction)
        )

    @staticmethod
    def _parse_section(entries: Dict[str, str], enum_type: Type[Enum]) -> Dict[Any, str]:
        return {member: entries[member.value].strip() for member in enum_type}

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise RuntimeError("No content loaded. Call load_content_from_yaml() first.")

    def get_objective(self, role) -> str:
        """
        Get the objective text for a role.

        Args:
            role: A Role member, or None for an unassigned player

        Returns:
            Objective text; a generic mission line for unassigned players
        """
        self._require_loaded()
        if role is None:
            return self.FALLBACK_OBJECTIVE
        return self.content.objectives[role]

    def get_event_message(self, kind: EventKind) -> str:
        self._require_loaded()
        return self.content.events[kind]

    def get_secret_action_message(self, action: SecretAction) -> str:
        self._require_loaded()
        return self.content.secret_actions[action]

    def is_loaded(self) -> bool:
        """Check if content has been loaded."""
        return self._loaded
