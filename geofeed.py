#!/usr/bin/env python3

# Read an RFC8805 geofeed and boil it down to one sample IP address per
# location.  A geofeed is a CSV file where each row looks like:
#   prefix,country,region,city,postal code
# for instance:
#   98.97.0.0/16,US,US-WA,Seattle,

from datetime import datetime
from email.utils import parsedate_to_datetime
from delaymsg import show, warn
from netaddr import IPAddress, IPNetwork, IPSet, AddrFormatError
from requests import get, HTTPError
import csv
import sys
if sys.version_info >= (3, 11): from datetime import UTC
else: import datetime as datetime_fix; UTC=datetime_fix.timezone.utc

# Reserved ranges, none of these should ever show up as a real location
PRIVATE = IPSet([IPNetwork(x) for x in [
    "0.0.0.0/8",       # RFC 1700 broadcast addresses
    "10.0.0.0/8",      # RFC 1918 Private address space
    "100.64.0.0/10",   # RFC 6598 Carrier graded NAT
    "127.0.0.0/8",     # Loopback addresses
    "169.254.0.0/16",  # RFC 6890 Link Local address
    "172.16.0.0/12",   # RFC 1918 Private address space
    "192.0.0.0/24",    # RFC 5736 IANA IPv4 Special Purpose Address Registry
    "192.0.2.0/24",    # RFC 5737 TEST-NET for internal use
    "192.168.0.0/16",  # RFC 1918 Private address space
    "198.18.0.0/15",   # RFC 2544 Testing of inter-network communications
    "198.51.100.0/24", # RFC 5737 TEST-NET-2 for internal use
    "203.0.113.0/24",  # RFC 5737 TEST-NET-3 for internal use
    "224.0.0.0/4",     # RFC 5771 Multicast Addresses
    "240.0.0.0/4",     # RFC 6890 Reserved for future use
    "::1/128",         # Loopback addresses
    "::/128",          # Unspecified address
    "::ffff:0:0/96",   # RFC 4291 IPv4-mapped address
    "100::/64",        # RFC 6666 Discard-only address block
    "2001:db8::/32",   # RFC 3849 Documentation
    "fc00::/7",        # RFC 4193 Unique-local
    "fe80::/10",       # RFC 4291 Link-local unicast
]])

def read_csv_url(key, url):
    # Pull down the feed, along with when the server says it last changed
    resp = get(url)
    if resp.status_code != 200:
        # Anything but a full answer (a 204, a 206, ...) is no use to us
        raise HTTPError(f"HTTP {resp.status_code} from {url}", response=resp)

    last_modified = parse_http_date(resp.headers.get("last-modified"))
    if last_modified is None:
        warn("No last-modified header sent by server, using current time", key=key)
        last_modified = datetime.now(UTC)

    return read_csv_text(resp.text), last_modified

def parse_http_date(value):
    if not value:
        return None
    try:
        ret = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if ret is None:
        return None
    if ret.tzinfo is None:
        # HTTP dates are always GMT
        ret = ret.replace(tzinfo=UTC)
    return ret.astimezone(UTC)

def read_csv_text(text):
    # Comments and blank lines are dropped before the CSV reader sees them
    lines = [x for x in text.splitlines() if len(x.strip()) > 0 and not x.lstrip().startswith("#")]
    rows = []
    for row in csv.reader(lines, delimiter=","):
        # All records need to look like the first one, otherwise we don't
        # trust that we know what the columns mean
        if len(rows) > 0 and len(row) != len(rows[0]):
            raise csv.Error(f"record {len(rows) + 1} has {len(row)} fields, expected {len(rows[0])}")
        rows.append(row)
    return rows

def parse_prefix(value):
    value = value.strip()
    if "/" not in value:
        raise AddrFormatError(f"invalid prefix: {value!r}")
    try:
        return IPNetwork(value)
    except ValueError as e:
        raise AddrFormatError(f"invalid prefix: {value!r}") from e

def is_private(cidr):
    return bool(cidr.ip in PRIVATE)

def sample_ip(cidr):
    # Skip past the network address so the sample is a normal looking host
    if cidr.size == 1:
        return cidr.ip
    return IPAddress(cidr.first + 1, cidr.version)

def column(row, i):
    return row[i].strip() if len(row) > i else ""

def location_key(row, group_by="city"):
    # Turn a row into a key for the location, or "" if the location looks wrong
    cc = column(row, 1).upper()
    state = column(row, 2).upper()
    city = column(row, 3)

    if len(cc) != 2 or not cc.isalpha():
        return ""

    # States might show up as "US-WA" or just "WA", we only want the "WA" part
    parts = state.split("-", 1)
    if len(parts) > 1:
        state = parts[1]
    if len(state) > 5:
        return ""

    if group_by == "country":
        return cc
    elif group_by == "city":
        return ",".join([cc, state, city])
    else:
        raise ValueError(f"Unknown grouping: {group_by}")

def split_location_key(key):
    parts = key.split(",", 2)
    while len(parts) < 3:
        parts.append("")
    return tuple(parts)

def extract_samples(key, rows, group_by="city"):
    ret = {
        "locations": {},
        "samples": {},
        "countries": set(),
        "rows": len(rows),
        "skipped": 0,
    }

    for row in rows:
        try:
            cidr = parse_prefix(column(row, 0))
        except AddrFormatError as e:
            show(f"Error parsing prefix {column(row, 0)!r}: {e}", key=key)
            ret["skipped"] += 1
            continue

        loc = location_key(row, group_by)
        if is_private(cidr) or loc == "":
            ret["skipped"] += 1
            continue

        ip = sample_ip(cidr)
        cc = column(row, 1).upper()
        ret["countries"].add(cc)
        ret["samples"].setdefault(cc, []).append(ip)
        # Only one sample per location, a later row just replaces the
        # earlier one
        ret["locations"][loc] = ip

    show(f"Read {len(ret['locations'])} locations in {len(ret['countries'])} countries from {ret['rows']} rows, skipped {ret['skipped']}", key=key)
    return ret

if __name__ == "__main__":
    print("This module is not meant to be run directly")
