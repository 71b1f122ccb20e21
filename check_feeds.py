#!/usr/bin/env python3

# Quick sanity check of the feeds, downloads each one and shows what the
# sampler makes of it, without calling the geolocation API

from get_all import load_feeds
import geofeed
import sys

def main():
    for feed in load_feeds():
        use = True
        if len(sys.argv) > 1:
            if sys.argv[1].lower() not in feed["name"]:
                use = False
        if use:
            try:
                rows, last_modified = geofeed.read_csv_url(feed["name"], feed["url"])
                city = geofeed.extract_samples(feed["name"], rows, "city")
                country = geofeed.extract_samples(feed["name"], rows, "country")
                print(f"{feed['name']:<18}Rows: {len(rows):>7,} / Cities: {len(city['locations']):>5,} / Countries: {len(country['locations']):>3,} / Last modified: {last_modified:%Y-%m-%d %H:%M:%S}", flush=True)
            except Exception as ex:
                print(f"{feed['name']:<18}FAILED: " + str(ex), flush=True)

if __name__ == "__main__":
    main()
