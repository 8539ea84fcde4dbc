import json
import logging
import os

logger = logging.getLogger(__name__)


class Settings:
    """Manage persisted defaults for the command line"""

    DEFAULT_SETTINGS = {
        'method': 'median',
        'radius': 1,
        'noise_variance': 10.0,
        'window_size': 8,
        'output_suffix': '_enhanced',
        'output_format': '.png',
    }

    def __init__(self, settings_file=None):
        if settings_file is None:
            # Store settings in user's home directory
            home = os.path.expanduser("~")
            self.settings_file = os.path.join(home, '.imgenhance_settings.json')
        else:
            self.settings_file = str(settings_file)

        self.settings = self.DEFAULT_SETTINGS.copy()
        self.load()

    def load(self):
        """Load settings from file"""
        if not os.path.exists(self.settings_file):
            return
        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load settings from %s: %s", self.settings_file, e)
            return
        if not isinstance(loaded, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", self.settings_file)
            return
        for key, value in loaded.items():
            if key in self.DEFAULT_SETTINGS:
                self.settings[key] = value
            else:
                logger.debug("Ignoring unknown setting %r", key)

    def save(self):
        """Save settings to file"""
        try:
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=2)
        except OSError as e:
            logger.warning("Failed to save settings to %s: %s", self.settings_file, e)

    def get(self, key, default=None):
        """Get a setting value"""
        return self.settings.get(key, default)

    def set(self, key, value):
        """Set a setting value"""
        self.settings[key] = value
        self.save()

    def as_params(self):
        """Filter parameters as keyword arguments for :func:`imgenhance.enhance`"""
        return {
            'radius': int(self.settings['radius']),
            'noise_variance': float(self.settings['noise_variance']),
            'window_size': int(self.settings['window_size']),
        }
