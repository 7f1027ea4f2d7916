import copy
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from commit_clock.core.config_service import DEFAULTS, ConfigService, validate_config


class ConfigServiceTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "config.yaml"
        self.config = ConfigService()

    def tearDown(self):
        self._tmp.cleanup()
        with patch.dict(os.environ, {}, clear=True):
            self.config.reload()

    def _reload(self, text, env=None):
        self.path.write_text(text, encoding="utf-8")
        with patch.dict(os.environ, env or {}, clear=True):
            self.config.reload(self.path)

    def test_is_singleton(self):
        self.assertIs(ConfigService(), self.config)

    def test_yaml_values_merge_over_defaults(self):
        self._reload("clock:\n  hour_format: 12\nnoise:\n  density: 0.1\n")
        self.assertEqual(self.config.get('clock.hour_format'), 12)
        self.assertEqual(self.config.get('noise.density'), 0.1)
        self.assertEqual(self.config.get('clock.time_format'), 'HH:MM')
        self.assertEqual(self.config.get('grid.cols'), 96)
        self.assertEqual(self.config.source, self.path)

    def test_environment_overrides_yaml(self):
        self._reload(
            "clock:\n  hour_format: 24\n",
            env={'CLOCK_HOUR_FORMAT': '12', 'PR_ENABLED': 'false', 'LOG_LEVEL': 'debug'},
        )
        self.assertEqual(self.config.get('clock.hour_format'), 12)
        self.assertFalse(self.config.get('github.enabled'))
        self.assertEqual(self.config.get('logging.level'), 'DEBUG')

    def test_malformed_environment_value_is_ignored(self):
        self._reload("noise:\n  density: 0.2\n", env={'CLOCK_NOISE_DENSITY': 'lots'})
        self.assertEqual(self.config.get('noise.density'), 0.2)

    def test_invalid_values_fall_back_to_defaults(self):
        self._reload("noise:\n  density: 2.5\nclock:\n  hour_format: 12\n")
        self.assertEqual(self.config.get_all(), DEFAULTS)

    def test_non_mapping_file_is_skipped(self):
        self._reload("- just\n- a list\n")
        self.assertEqual(self.config.get('grid.rows'), 37)

    def test_empty_section_keeps_defaults(self):
        self._reload("github:\nclock:\n  hour_format: 12\n")
        self.assertEqual(self.config.get('clock.hour_format'), 12)
        self.assertEqual(self.config.get('github.poll_interval'), 300)
        self.assertEqual(self.config.get('github.api_url'), 'https://api.github.com')

    def test_non_mapping_section_falls_back_to_defaults(self):
        self._reload("grid: 5\nclock:\n  hour_format: 12\n")
        self.assertEqual(self.config.get_all(), DEFAULTS)

    def test_get_and_set(self):
        self._reload("{}\n")
        self.config.set('github.enabled', False)
        self.assertFalse(self.config.get('github.enabled'))
        self.assertEqual(self.config.get('missing.key', 'fallback'), 'fallback')
        self.assertEqual(self.config.get('grid.cols.deeper', 7), 7)

    def test_get_all_is_a_copy(self):
        self._reload("{}\n")
        values = self.config.get_all()
        values['grid']['cols'] = 1
        self.assertEqual(self.config.get('grid.cols'), 96)


class ValidateConfigTests(unittest.TestCase):
    def _with(self, section, key, value):
        config = copy.deepcopy(DEFAULTS)
        config[section][key] = value
        return config

    def test_defaults_are_valid(self):
        self.assertTrue(validate_config(copy.deepcopy(DEFAULTS)))

    def test_rejects_bad_values(self):
        cases = [
            ('clock', 'hour_format', 13),
            ('clock', 'time_format', 'SS'),
            ('grid', 'cols', 0),
            ('grid', 'band_gap', -1),
            ('noise', 'density', -0.5),
            ('theme', 'palette', []),
            ('theme', 'palette', ['green']),
            ('theme', 'index', 10),
            ('github', 'poll_interval', 0),
            ('github', 'timeout', 'soon'),
            ('grid', 'show_year', 'yes'),
            ('grid', 'year_gap', -2),
            ('grid', 'rows', 30),
            ('theme', 'active_alpha', 1.5),
            ('theme', 'active_alpha_jitter', True),
            ('github', 'ticket_url', 'https://jira.example.test/browse/'),
        ]
        for section, key, value in cases:
            with self.subTest(key=f"{section}.{key}", value=value):
                with self.assertRaises(ValueError):
                    validate_config(self._with(section, key, value))

    def test_rejects_non_mapping_sections(self):
        for section in ('grid', 'github', 'theme'):
            with self.subTest(section=section):
                config = copy.deepcopy(DEFAULTS)
                config[section] = 5
                with self.assertRaises(ValueError):
                    validate_config(config)

    def test_missing_or_null_sections_are_allowed(self):
        config = copy.deepcopy(DEFAULTS)
        config['github'] = None
        del config['noise']
        self.assertTrue(validate_config(config))

    def test_year_band_needs_more_rows(self):
        config = copy.deepcopy(DEFAULTS)
        config['grid']['rows'] = 28
        with self.assertRaises(ValueError):
            validate_config(config)
        config['grid']['show_year'] = False
        self.assertTrue(validate_config(config))

    def test_ticket_url_with_placeholder(self):
        config = self._with('github', 'ticket_url', 'https://jira.example.test/browse/{key}')
        self.assertTrue(validate_config(config))


if __name__ == "__main__":
    unittest.main()
