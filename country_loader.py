import os
import threading

import requests

from country import Country
from logging_setup import get_logger

# Constants
COUNTRIES_API_URL = os.environ.get('COUNTRIES_API_URL', 'https://restcountries.com/v3.1/all')
COUNTRIES_API_TIMEOUT = float(os.environ.get('COUNTRIES_API_TIMEOUT', 30))
# /all refuses requests without a field list
COUNTRY_FIELDS = ('name', 'cca2', 'cca3', 'altSpellings', 'idd', 'flags')

log = get_logger(component='country_loader')


class CountryLoadError(Exception):
    pass


class CountryLoader:
    def __init__(self, url=COUNTRIES_API_URL, fields=COUNTRY_FIELDS, timeout=COUNTRIES_API_TIMEOUT):
        self.url = url
        self.fields = fields
        self.timeout = timeout

    def fetch(self):
        """Fetch every country in one GET and wrap each record"""
        params = {'fields': ','.join(self.fields)} if self.fields else None
        try:
            response = requests.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise CountryLoadError(f"Request to {self.url} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise CountryLoadError(f"Response from {self.url} is not JSON") from e

        if not isinstance(data, list):
            raise CountryLoadError(f"Expected a JSON array from {self.url}, got {type(data).__name__}")

        try:
            return [Country.from_dict(record) for record in data]
        except ValueError as e:
            raise CountryLoadError(str(e)) from e


class CancelToken:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()


class LoadTask:
    """
    A single fetch bound to one connection's lifetime.

    Callbacks never fire once the token is cancelled, so a response that lands
    after the client left is dropped instead of overwriting newer state.
    """

    def __init__(self, loader, token, on_success, on_failure):
        self.loader = loader
        self.token = token
        self.on_success = on_success
        self.on_failure = on_failure
        self.started = False

    def run(self):
        if self.started:
            raise RuntimeError("Load task already started")
        self.started = True

        if self.token.cancelled:
            log.info('country_load_discarded', url=self.loader.url, reason='cancelled_before_start')
            return

        try:
            countries = self.loader.fetch()
        except CountryLoadError as e:
            if self.token.cancelled:
                log.info('country_load_discarded', url=self.loader.url, reason='cancelled')
                return
            log.error('country_load_failed', url=self.loader.url, error=str(e))
            self.on_failure(e)
            return

        if self.token.cancelled:
            log.info('country_load_discarded', url=self.loader.url, reason='cancelled')
            return

        log.info('country_load_succeeded', url=self.loader.url, count=len(countries))
        self.on_success(countries)
