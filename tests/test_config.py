"""
Unit tests for repometa.config module
"""
import unittest
import tempfile
import os
import shutil
import json
from pathlib import Path
from unittest.mock import patch

from repometa.config import (
    load_config,
    get_config_path,
    get_default_config,
    merge_configs,
    apply_env_overrides,
)


class TestConfigManagement(unittest.TestCase):
    """Test configuration loading"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {'HOME': self.temp_dir})
        self.env.start()
        for key in [k for k in os.environ if k.startswith('REPOMETA_')]:
            del os.environ[key]
        self.config_dir = Path(self.temp_dir) / '.repometa'

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.temp_dir)

    def test_get_default_config(self):
        """Test default configuration structure"""
        config = get_default_config()

        self.assertEqual(config['git']['configuration_scope'], '')
        self.assertEqual(config['git']['remote_name'], '')
        self.assertIsNone(config['paths']['case_sensitive'])
        self.assertEqual(config['logging']['level'], 'WARNING')
        self.assertEqual(config['output']['format'], 'jsonl')

    def test_load_config_no_file(self):
        """Test loading config when no file exists"""
        self.assertEqual(load_config(), get_default_config())

    def test_load_config_json_file(self):
        self.config_dir.mkdir()
        with open(self.config_dir / 'config.json', 'w') as f:
            json.dump({'git': {'remote_name': 'upstream'}, 'logging': {'level': 'DEBUG'}}, f)

        config = load_config()
        self.assertEqual(config['git']['remote_name'], 'upstream')
        # untouched keys keep their defaults
        self.assertEqual(config['git']['configuration_scope'], '')
        self.assertEqual(config['logging']['level'], 'DEBUG')

    def test_load_config_toml_file(self):
        self.config_dir.mkdir()
        (self.config_dir / 'config.toml').write_text('[git]\nconfiguration_scope = "local"\n')
        self.assertEqual(load_config()['git']['configuration_scope'], 'local')

    def test_load_config_yaml_file(self):
        self.config_dir.mkdir()
        (self.config_dir / 'config.yaml').write_text('paths:\n  case_sensitive: false\n')
        self.assertIs(load_config()['paths']['case_sensitive'], False)

    def test_json_takes_precedence(self):
        self.config_dir.mkdir()
        (self.config_dir / 'config.json').write_text('{"output": {"format": "csv"}}')
        (self.config_dir / 'config.yaml').write_text('output:\n  format: yaml\n')
        self.assertEqual(get_config_path(), self.config_dir / 'config.json')
        self.assertEqual(load_config()['output']['format'], 'csv')

    def test_invalid_file_falls_back_to_defaults(self):
        self.config_dir.mkdir()
        (self.config_dir / 'config.json').write_text('{not json')
        with self.assertLogs('repometa', level='ERROR'):
            config = load_config()
        self.assertEqual(config, get_default_config())

    def test_non_mapping_file_is_ignored(self):
        self.config_dir.mkdir()
        (self.config_dir / 'config.yaml').write_text('- a\n- b\n')
        self.assertEqual(load_config(), get_default_config())

    def test_config_env_variable(self):
        custom = Path(self.temp_dir) / 'custom.json'
        custom.write_text('{"git": {"remote_name": "fork"}}')
        with patch.dict(os.environ, {'REPOMETA_CONFIG': str(custom)}):
            self.assertEqual(get_config_path(), custom)
            self.assertEqual(load_config()['git']['remote_name'], 'fork')

    def test_config_env_variable_missing_file(self):
        with patch.dict(os.environ, {'REPOMETA_CONFIG': str(Path(self.temp_dir) / 'nope.json')}):
            self.assertEqual(get_config_path(), self.config_dir / 'config.json')


class TestEnvOverrides(unittest.TestCase):
    """Test REPOMETA_* environment overrides"""

    def test_multi_word_keys(self):
        with patch.dict(os.environ, {'REPOMETA_GIT_CONFIGURATION_SCOPE': 'local'}, clear=True):
            config = apply_env_overrides(get_default_config())
        self.assertEqual(config['git']['configuration_scope'], 'local')

    def test_boolean_values(self):
        with patch.dict(os.environ, {'REPOMETA_PATHS_CASE_SENSITIVE': 'off'}, clear=True):
            config = apply_env_overrides(get_default_config())
        self.assertIs(config['paths']['case_sensitive'], False)

    def test_unknown_keys_are_ignored(self):
        with patch.dict(os.environ, {'REPOMETA_NOPE_VALUE': '1', 'REPOMETA_GIT_NOPE': 'x'}, clear=True):
            config = apply_env_overrides(get_default_config())
        self.assertEqual(config, get_default_config())


class TestMergeConfigs(unittest.TestCase):

    def test_nested_merge(self):
        merged = merge_configs({'a': {'b': 1, 'c': 2}, 'd': 3}, {'a': {'b': 10}, 'e': 4})
        self.assertEqual(merged, {'a': {'b': 10, 'c': 2}, 'd': 3, 'e': 4})

    def test_base_is_not_modified(self):
        base = {'a': 1}
        merge_configs(base, {'a': 2})
        self.assertEqual(base, {'a': 1})


if __name__ == '__main__':
    unittest.main()
