"""
Unit tests for ContentManager class.
Tests YAML loading, validation and text lookup for ship content.
"""

import os
import tempfile

import pytest
import yaml

from src.content_manager import ContentManager, ContentValidationError
from src.core.ship import EventKind, Role, SecretAction
from tests.helpers.room_helpers import CONTENT_FILE


def valid_content():
    return {
        'objectives': {role.value: f'{role.value} objective' for role in Role},
        'events': {kind: f'{kind} happened' for kind in ['meteor', 'radiation', 'alien', 'system_failure']},
        'secret_actions': {action.value: f'{action.value} used' for action in SecretAction},
    }


class TestContentManager:
    """Test cases for ContentManager class."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.yaml_path = os.path.join(self.temp_dir, 'ship_content.yaml')

    def teardown_method(self):
        if os.path.exists(self.yaml_path):
            os.remove(self.yaml_path)
        os.rmdir(self.temp_dir)

    def write_yaml(self, data):
        with open(self.yaml_path, 'w', encoding='utf-8') as file:
            yaml.safe_dump(data, file)

    def test_bundled_content_is_valid(self):
        manager = ContentManager(CONTENT_FILE)
        manager.load_content_from_yaml()

        assert manager.is_loaded()
        for role in Role:
            assert manager.get_objective(role)
        assert 'Meteor' in manager.get_event_message(EventKind.METEOR)

    def test_load_valid_yaml(self):
        self.write_yaml(valid_content())
        manager = ContentManager(self.yaml_path)

        manager.load_content_from_yaml()

        assert manager.get_objective(Role.SPY) == 'Spy objective'
        assert manager.get_event_message(EventKind.ALIEN) == 'alien happened'
        assert manager.get_secret_action_message(SecretAction.HACK) == 'hack used'

    def test_objective_for_unassigned_player(self):
        self.write_yaml(valid_content())
        manager = ContentManager(self.yaml_path)
        manager.load_content_from_yaml()

        assert manager.get_objective(None) == ContentManager.FALLBACK_OBJECTIVE

    def test_missing_file(self):
        manager = ContentManager(os.path.join(self.temp_dir, 'missing.yaml'))
        with pytest.raises(FileNotFoundError):
            manager.load_content_from_yaml()
        assert not manager.is_loaded()

    def test_missing_role_entry(self):
        data = valid_content()
        del data['objectives']['AI']
        self.write_yaml(data)

        with pytest.raises(ContentValidationError, match='objectives'):
            ContentManager(self.yaml_path).load_content_from_yaml()

    def test_empty_text_rejected(self):
        data = valid_content()
        data['secret_actions']['door'] = '   '
        self.write_yaml(data)

        with pytest.raises(ContentValidationError, match='cannot be empty'):
            ContentManager(self.yaml_path).load_content_from_yaml()

    def test_non_dict_root_rejected(self):
        self.write_yaml(['not', 'a', 'dict'])

        with pytest.raises(ContentValidationError):
            ContentManager(self.yaml_path).load_content_from_yaml()

    def test_invalid_yaml(self):
        with open(self.yaml_path, 'w', encoding='utf-8') as file:
            file.write('objectives: [unclosed')

        with pytest.raises(yaml.YAMLError):
            ContentManager(self.yaml_path).load_content_from_yaml()

    def test_lookup_before_load(self):
        with pytest.raises(RuntimeError):
            ContentManager(self.yaml_path).get_objective(Role.CAPTAIN)
