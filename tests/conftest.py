import os

# The app module reads this at import; eventlet monkey patching does not belong in a test run
os.environ.setdefault('ASYNC_MODE', 'threading')

import pytest

from country import Country


def make_country(name, /, **overrides):
    raw = {
        'name': {'official': name, 'nativeName': {'eng': {'official': name}}},
        'cca2': name[:2].upper(),
        'cca3': name[:3].upper(),
        'altSpellings': [name[:2].upper(), name],
        'idd': {'root': '+1'},
        'flags': {'png': f"https://flagcdn.com/w320/{name[:2].lower()}.png"},
    }
    raw.update(overrides)
    return Country.from_dict(raw)


@pytest.fixture
def three_countries():
    return [make_country('Zimbabwe'), make_country('Albania'), make_country('Chad')]
