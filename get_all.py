#!/usr/bin/env python3

# Pull down each geofeed listed in the helpers directory, pick sample IPs
# for each location, geolocate them, and write out the JSON files for the
# map page.

from importlib.util import spec_from_file_location, module_from_spec
from delaymsg import show, error
from geolocate import annotate, GeolocationError, FASTAH_URL, TIMEOUT
from requests import RequestException
import csv
import os
import sys
import geofeed
import write_output

BASE_DIR = os.path.split(__file__)[0]
HELPERS_DIR = os.path.join(BASE_DIR, "helpers")
DEFAULT_OUTPUT_DIR = os.path.join("gen", "latest-feeds")

def load_feeds(helpers_dir=HELPERS_DIR):
    # Each file in the helpers dir describes one feed
    feeds = []
    for cur in sorted(os.listdir(helpers_dir)):
        if cur.endswith(".py"):
            spec = spec_from_file_location("feed", os.path.join(helpers_dir, cur))
            helper = module_from_spec(spec)
            spec.loader.exec_module(helper)
            feed = helper.get_feed()
            if not isinstance(feed, dict) or 'name' not in feed:
                raise ValueError(f"Invalid feed definition in {cur}")
            feeds.append(feed)
    return feeds

def load_config(argv, environ, helpers_dir=HELPERS_DIR):
    # Returns None if the arguments don't make sense
    feeds = load_feeds(helpers_dir)
    names = {x["name"].lower() for x in feeds}

    mode = "countries"
    group_by = "city"
    only = set()
    for arg in argv:
        arg = arg.lower()
        if arg in write_output.MODES:
            mode = arg
        elif arg == "bycountry":
            group_by = "country"
        elif arg in names:
            only.add(arg)
        else:
            return None

    if len(only) > 0:
        feeds = [x for x in feeds if x["name"].lower() in only]

    return {
        "feeds": feeds,
        "mode": mode,
        "group_by": group_by,
        "api_key": environ.get("FASTAH_PRIVATE_API_KEY", ""),
        "api_url": environ.get("FASTAH_API_URL", FASTAH_URL),
        "output_dir": environ.get("GEOFEED_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
        "timeout": TIMEOUT,
    }

def process_feed(config, feed):
    key = feed["name"]
    show(feed["url"], key=key)

    rows, last_modified = geofeed.read_csv_url(key, feed["url"])
    samples = geofeed.extract_samples(key, rows, config["group_by"])

    # Everything gets geolocated before anything is written, so a failure
    # here never leaves half a set of files behind
    if config["mode"] == "flat":
        results = []
    else:
        results = annotate(key, samples["locations"], config)

    dest = write_output.write_feed(config["output_dir"], feed, config["mode"], last_modified, samples, results)
    show(f"Wrote {write_output.META_FILE} and {write_output.SAMPLES_FILE} to {dest}", key=key)

def run(config):
    # Returns the names of the feeds that were written out
    written = []
    for feed in config["feeds"]:
        try:
            process_feed(config, feed)
            written.append(feed["name"])
        except RequestException as e:
            error(f"Error reading feed: {e}", key=feed["name"])
        except csv.Error as e:
            error(f"Error reading CSV: {e}", key=feed["name"])
        except OSError as e:
            error(f"Error writing generated files: {e}", key=feed["name"])
    return written

def main():
    config = load_config(sys.argv[1:], os.environ)
    if config is None:
        print("Usage:")
        print("countries - Write one GeoJSON feature per country (default)")
        print("points    - Write one GeoJSON point per location")
        print("flat      - Just write the sample IPs for each country, no geolocation")
        print("bycountry - Only geolocate one sample IP per country")
        print("<feed>    - Only work on the named feed(s): " + ", ".join(x["name"] for x in load_feeds()))
        sys.exit(1)

    show(f"Working on {len(config['feeds'])} feeds, writing '{config['mode']}' samples to {config['output_dir']}")
    try:
        written = run(config)
    except GeolocationError as e:
        error(str(e))
        sys.exit(1)
    show(f"All done, wrote {len(written)} of {len(config['feeds'])} feeds")

if __name__ == "__main__":
    main()
