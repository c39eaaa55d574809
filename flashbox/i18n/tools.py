import json
from pathlib import Path
from typing import Dict, Set

I18N_DIR = Path(__file__).resolve().parent


def find_missing_keys(i18n_dir: Path = I18N_DIR) -> Dict[str, Set[str]]:
    """Maps each locale code to the keys some other catalog has but it lacks."""
    locale_key_map: Dict[str, Set[str]] = {}

    for file_path in sorted(i18n_dir.glob('*.json')):
        with file_path.open('r', encoding='utf-8') as f:
            locale_key_map[file_path.stem] = set(json.load(f).keys())

    all_keys = set().union(*locale_key_map.values()) if locale_key_map else set()
    return {locale: all_keys - keys for locale, keys in locale_key_map.items()}


def print_translation_summary():
    for locale, missing_keys in find_missing_keys().items():
        if missing_keys:
            print(f"Locale '{locale}' is missing {len(missing_keys)} keys:")
            for key in sorted(missing_keys):
                print(f"  - {key}")
        else:
            print(f"Locale '{locale}' has all keys.")

if __name__ == "__main__":
    print_translation_summary()
