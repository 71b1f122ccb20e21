#!/usr/bin/env python3

# Reverse geocode sample IPs with the Fastah IP geolocation API.  For
# details on the API, see
#   https://docs.getfastah.com/reference/getiplocation

from delaymsg import DelayMsg, show
from requests import get, RequestException
import json
import os
import sys

FASTAH_URL = "https://ep.api.getfastah.com/whereis/v1/json/"
TIMEOUT = 5

# Countries where people expect "Seattle, WA" instead of "Seattle, Washington"
ABBREVIATE_STATES = {"US", "CA", "AU", "NZ", "GB", "CH"}

class GeolocationError(Exception):
    # Raised when the API can't be used at all, there's no point in carrying
    # on with the run if this happens
    pass

def lookup_ip(key, ip, api_key, api_url=FASTAH_URL, timeout=TIMEOUT):
    try:
        resp = get(api_url + str(ip), headers={"Fastah-Key": api_key}, timeout=timeout)
    except RequestException as e:
        raise GeolocationError(f"Error calling Fastah IP Geolocation API for IP {ip}: {e}") from e
    if resp.status_code != 200:
        raise GeolocationError(f"Error calling Fastah IP Geolocation API for IP {ip}: HTTP {resp.status_code}")

    try:
        return parse_response(resp.json(), ip)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        # A bad answer for one IP just means we skip that IP
        show(f"Error parsing Fastah IP Geolocation API response IP {ip}: {e}", key=key)
        return None

def parse_response(data, ip=None):
    if not isinstance(data, dict) or not isinstance(data.get("locationData"), dict):
        raise TypeError("response has no locationData object")
    loc = data["locationData"]
    sat = data.get("satellite") or {}
    if not isinstance(sat, dict):
        raise TypeError(f"unexpected satellite value: {sat!r}")
    ret = {
        "ip": str(ip) if ip is not None else data.get("ip", ""),
        "country_code": (loc.get("countryCode") or "").upper(),
        "country_name": loc.get("countryName") or "",
        "state_code": loc.get("stateCode") or "",
        "state_name": loc.get("stateName") or "",
        "city_name": loc.get("cityName") or "",
        "lat": float(loc["lat"]),
        "lng": float(loc["lng"]),
        "satellite": sat.get("provider") or None,
    }
    ret["display_name"] = display_name(ret)
    return ret

def display_name(result):
    cc = result.get("country_code", "")
    city = result.get("city_name", "")
    state = result.get("state_name", "")
    state_code = result.get("state_code", "")

    if cc in ABBREVIATE_STATES and state_code:
        # Some APIs return "US-WA", just show the "WA"
        state_label = state_code.split("-")[-1]
    else:
        state_label = state

    if city and state and city != state:
        return f"{city}, {state_label}"
    elif city:
        return city
    elif state:
        return state
    else:
        return result.get("country_name") or cc

def annotate(key, locations, config):
    # Lookup each location's sample IP, one at a time
    if not config.get("api_key"):
        raise GeolocationError("FASTAH_PRIVATE_API_KEY is not set")

    ret = []
    with DelayMsg(key=key) as msg:
        for i, (loc, ip) in enumerate(locations.items()):
            msg(f"Geolocating location {i + 1:,} of {len(locations):,}...")
            result = lookup_ip(
                key, ip, config["api_key"],
                api_url=config.get("api_url", FASTAH_URL),
                timeout=config.get("timeout", TIMEOUT),
            )
            if result is not None:
                ret.append((loc, result))
    show(f"Geolocated {len(ret):,} of {len(locations):,} locations", key=key)
    return ret

def main():
    if len(sys.argv) == 1:
        print("Need to specify one or more IPs to lookup")
        exit(1)

    for ip in sys.argv[1:]:
        print(json.dumps(lookup_ip("lookup", ip, os.environ.get("FASTAH_PRIVATE_API_KEY", ""))))

if __name__ == "__main__":
    main()
