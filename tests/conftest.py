import json

import pytest
import requests

import geofeed
import geolocate


class FakeResponse:
    def __init__(self, status_code=200, text="", headers=None):
        self.status_code = status_code
        self.text = text
        self.headers = headers or {}

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeWeb:
    """Stands in for requests.get, answers from a dict of url -> response."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, url, response):
        self.routes[url] = response

    def add_location(self, ip, country_code, country_name, lat, lng, state_code="", state_name="", city="", satellite="SpaceX Starlink", api_url=geolocate.FASTAH_URL):
        body = {
            "ip": ip,
            "isEuropeanUnion": False,
            "locationData": {
                "countryName": country_name,
                "countryCode": country_code,
                "stateName": state_name,
                "stateCode": state_code,
                "cityName": city,
                "lat": lat,
                "lng": lng,
                "tz": "UTC",
                "continentCode": "NA",
            },
            "satellite": {"provider": satellite} if satellite else None,
        }
        self.add(api_url + ip, FakeResponse(text=json.dumps(body)))

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        resp = self.routes.get(url)
        if resp is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(resp, Exception):
            raise resp
        return resp


@pytest.fixture
def web(monkeypatch):
    fake = FakeWeb()
    monkeypatch.setattr(geofeed, "get", fake.get)
    monkeypatch.setattr(geolocate, "get", fake.get)
    return fake
