# flashbox/core/locale_manager.py

import json
from pathlib import Path
from typing import Dict, Any, List, Optional

from flashbox.config import LOCALE
from flashbox.core.log_manager import logger

# Directory holding the message catalogs (en.json, de.json, ...)
I18N_DIR = Path(__file__).resolve().parent.parent / 'i18n'

FALLBACK_LOCALE = 'en'

class LocaleManager:
    """
    Loads every JSON catalog in the i18n directory and resolves message keys.
    Missing keys fall back to the English catalog, then to a visible marker.
    """

    def __init__(self, i18n_dir: Path = I18N_DIR, default_locale: str = LOCALE):
        self.i18n_dir = i18n_dir
        self.default_locale = default_locale
        self._all_translations: Dict[str, Dict[str, str]] = {}

        # Fallback first, so every other locale can lean on it
        self._fallback_translations = self._load_translations(FALLBACK_LOCALE)
        self._all_translations[FALLBACK_LOCALE] = self._fallback_translations

        if not self.i18n_dir.is_dir():
            logger.error(f"I18N directory not found at {self.i18n_dir}. Cannot discover locales.")
            return

        for path in sorted(self.i18n_dir.glob('*.json')):
            if path.stem not in self._all_translations:
                self._all_translations[path.stem] = self._load_translations(path.stem)

        logger.debug(f"LocaleManager initialized. Supported: {self.supported_locales}. Fallback: {FALLBACK_LOCALE}")

    def _load_translations(self, locale: str) -> Dict[str, str]:
        file_path = self.i18n_dir / f'{locale}.json'

        try:
            with file_path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"Translation file not found for locale '{locale}' ({file_path.name}).")
            return {}
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON format in file for locale '{locale}': {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Translation file for locale '{locale}' must hold a JSON object.")
            return {}
        return data

    @property
    def supported_locales(self) -> List[str]:
        return list(self._all_translations.keys())

    def T(self, key: str, locale: Optional[str] = None, **kwargs: Any) -> str:
        """
        Translates `key` into `locale` (the configured locale when omitted).

        Args:
            key: The identifier key for the string to translate.
            locale: Locale code such as 'en' or 'de'.
            **kwargs: Variables for string interpolation.
        """
        current_locale = locale or self.default_locale
        translations = self._all_translations.get(current_locale, {})

        translated_string = translations.get(key)

        if translated_string is None:
            translated_string = self._fallback_translations.get(key)
            if translated_string is None:
                logger.warning(f"Missing translation key '{key}' in both '{current_locale}' and fallback locales.")
                return f"!! {key} !!"
            logger.warning(f"Missing translation key '{key}' for locale '{current_locale}'.")

        if kwargs:
            try:
                return translated_string.format(**kwargs)
            except (KeyError, IndexError, ValueError) as e:
                logger.error(f"Formatting failed for key '{key}' in locale '{current_locale}': {e}")
                return translated_string

        return translated_string

# Globally accessible singleton instance
global_locale_manager = LocaleManager()

T = global_locale_manager.T

SUPPORTED_LOCALES = global_locale_manager.supported_locales
