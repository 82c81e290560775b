import pytest
import requests

import country_loader
from country_loader import CancelToken, CountryLoader, CountryLoadError, LoadTask


class FakeResponse:
    def __init__(self, payload=None, status_code=200, bad_json=False):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


def patch_get(monkeypatch, response=None, error=None):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append({'url': url, 'params': params, 'timeout': timeout})
        if error:
            raise error
        return response

    monkeypatch.setattr(country_loader.requests, 'get', fake_get)
    return calls


RECORDS = [
    {'name': {'official': 'Republic of Chad'}, 'cca2': 'TD', 'cca3': 'TCD'},
    {'name': {'official': 'Republic of Albania'}, 'cca2': 'AL', 'cca3': 'ALB'},
]


def test_fetch_wraps_every_record(monkeypatch):
    calls = patch_get(monkeypatch, FakeResponse(RECORDS))

    countries = CountryLoader(url='https://example.test/all', timeout=5).fetch()

    assert [c.official_name for c in countries] == ['Republic of Chad', 'Republic of Albania']
    assert calls == [{
        'url': 'https://example.test/all',
        'params': {'fields': 'name,cca2,cca3,altSpellings,idd,flags'},
        'timeout': 5,
    }]


def test_fetch_without_field_list(monkeypatch):
    calls = patch_get(monkeypatch, FakeResponse([]))

    assert CountryLoader(fields=()).fetch() == []
    assert calls[0]['params'] is None


def test_non_2xx_is_a_load_error(monkeypatch):
    patch_get(monkeypatch, FakeResponse({'message': 'bad request'}, status_code=400))

    with pytest.raises(CountryLoadError):
        CountryLoader().fetch()


def test_network_error_is_a_load_error(monkeypatch):
    patch_get(monkeypatch, error=requests.ConnectionError("connection refused"))

    with pytest.raises(CountryLoadError):
        CountryLoader().fetch()


def test_malformed_body_is_a_load_error(monkeypatch):
    patch_get(monkeypatch, FakeResponse(bad_json=True))

    with pytest.raises(CountryLoadError):
        CountryLoader().fetch()


@pytest.mark.parametrize('payload', [{'status': 404}, 'countries', [1, 2, 3]])
def test_body_must_be_an_array_of_objects(monkeypatch, payload):
    patch_get(monkeypatch, FakeResponse(payload))

    with pytest.raises(CountryLoadError):
        CountryLoader().fetch()


class StubLoader:
    url = 'https://example.test/all'

    def __init__(self, countries=None, error=None, on_fetch=None):
        self.countries = countries or []
        self.error = error
        self.on_fetch = on_fetch
        self.fetches = 0

    def fetch(self):
        self.fetches += 1
        if self.on_fetch:
            self.on_fetch()
        if self.error:
            raise self.error
        return self.countries


def test_task_reports_success(three_countries):
    results, failures = [], []
    task = LoadTask(StubLoader(three_countries), CancelToken(), results.append, failures.append)

    task.run()

    assert results == [three_countries]
    assert failures == []


def test_task_reports_failure():
    results, failures = [], []
    error = CountryLoadError("boom")
    task = LoadTask(StubLoader(error=error), CancelToken(), results.append, failures.append)

    task.run()

    assert results == []
    assert failures == [error]


def test_task_runs_once(three_countries):
    loader = StubLoader(three_countries)
    task = LoadTask(loader, CancelToken(), lambda countries: None, lambda error: None)
    task.run()

    with pytest.raises(RuntimeError):
        task.run()
    assert loader.fetches == 1


def test_cancelled_before_start_skips_the_request(three_countries):
    results, failures = [], []
    loader = StubLoader(three_countries)
    token = CancelToken()
    token.cancel()

    LoadTask(loader, token, results.append, failures.append).run()

    assert loader.fetches == 0
    assert results == failures == []


def test_response_after_cancel_is_discarded(three_countries):
    results, failures = [], []
    token = CancelToken()
    loader = StubLoader(three_countries, on_fetch=token.cancel)

    LoadTask(loader, token, results.append, failures.append).run()

    assert loader.fetches == 1
    assert results == failures == []


def test_failure_after_cancel_is_discarded():
    results, failures = [], []
    token = CancelToken()
    loader = StubLoader(error=CountryLoadError("boom"), on_fetch=token.cancel)

    LoadTask(loader, token, results.append, failures.append).run()

    assert results == failures == []


@pytest.mark.parametrize('payload', [
    [{'name': 'Chad', 'cca2': 'TD'}],
    [{'name': {'official': 'Republic of Chad'}, 'idd': '+235'}],
    [{'name': {'official': 'Republic of Chad', 'nativeName': {'fra': 'Tchad'}}}],
    [{'name': {'official': 'Republic of Chad', 'nativeName': ['Tchad']}}],
    [{'name': {'official': 'Republic of Chad'}, 'altSpellings': 'TD'}],
    [{'name': {'official': 'Republic of Chad'}, 'cca2': 148}],
    [{'name': {'official': 'Republic of Chad'}, 'flags': {'png': ['a.png']}}],
])
def test_records_with_wrong_nested_shape_are_a_load_error(monkeypatch, payload):
    patch_get(monkeypatch, FakeResponse(payload))

    with pytest.raises(CountryLoadError):
        CountryLoader().fetch()


def test_wrong_nested_shape_reaches_on_failure(monkeypatch):
    patch_get(monkeypatch, FakeResponse([{'name': 'Chad', 'cca2': 'TD'}]))
    results, failures = [], []

    LoadTask(CountryLoader(), CancelToken(), results.append, failures.append).run()

    assert results == []
    assert len(failures) == 1
    assert isinstance(failures[0], CountryLoadError)
