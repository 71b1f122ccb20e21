#!/usr/bin/env python3

# Write out the files the map page reads:
#   <output_dir>/<feed>/rfc8805.meta.json - Where the feed came from
#   <output_dir>/<feed>/samples.json      - The sample IPs, as GeoJSON or a simple list

import json
import os

META_FILE = "rfc8805.meta.json"
SAMPLES_FILE = "samples.json"
MODES = ("countries", "points", "flat")

def colour_for_brand(brand):
    # Starlink's colours are white on black and black on white, so go with a
    # grey that's visible on both.  Everyone else gets Viasat blue.
    if brand == "starlink":
        return "#5A5A5A"
    return "#009FE3"

def feed_dir(output_dir, feed):
    ret = os.path.join(output_dir, feed["name"].lower())
    os.makedirs(ret, exist_ok=True)
    return ret

def format_time(value):
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")

def build_meta(feed, last_modified, countries):
    return {
        "provider": feed["pretty"],
        "feedUrl": feed["url"],
        "lastModified": format_time(last_modified),
        "visibleCountries": sorted(set(countries)),
    }

def build_flat(samples):
    return {cc: [str(x) for x in ips] for cc, ips in sorted(samples.items())}

def base_properties(feed, result):
    return {
        "cciso2": result["country_code"],
        "countryName": result["country_name"],
        "marker-color": colour_for_brand(feed["name"]),
        "marker-size": "large",
        "title": feed["pretty"],
        "description": "Approximate location as advertised by " + feed["pretty"],
    }

def build_points(feed, results):
    # One marker for each location in the feed
    features = []
    for loc, result in sorted(results, key=lambda x: (x[1]["country_code"], x[0])):
        props = base_properties(feed, result)
        props["displayName"] = result["display_name"]
        props["ip"] = result["ip"]
        props["location"] = loc
        features.append({
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [result["lng"], result["lat"]]},
            "properties": props,
        })
    return {"type": "FeatureCollection", "features": features}

def build_countries(feed, results, samples):
    # One feature per country, with a marker for each location in that country
    countries = {}
    for loc, result in sorted(results, key=lambda x: (x[1]["country_code"], x[0])):
        cc = result["country_code"]
        if cc not in countries:
            props = base_properties(feed, result)
            if cc in samples:
                props["ip-samples"] = [str(x) for x in samples[cc]]
            countries[cc] = {
                "type": "Feature",
                "geometry": {"type": "MultiPoint", "coordinates": []},
                "properties": props,
            }
        countries[cc]["geometry"]["coordinates"].append([result["lng"], result["lat"]])
    return {"type": "FeatureCollection", "features": list(countries.values())}

def build_samples(feed, mode, samples, results):
    if mode == "flat":
        return build_flat(samples["samples"])
    elif mode == "points":
        return build_points(feed, results)
    elif mode == "countries":
        return build_countries(feed, results, samples["samples"])
    else:
        raise ValueError(f"Unknown output mode: {mode}")

def write_json(fn, data):
    with open(fn, "wt", newline="", encoding="utf-8") as f:
        json.dump(data, f, indent=1)
        f.write("\n")

def write_feed(output_dir, feed, mode, last_modified, samples, results):
    dest = feed_dir(output_dir, feed)
    meta = build_meta(feed, last_modified, samples["countries"])
    write_json(os.path.join(dest, META_FILE), meta)
    write_json(os.path.join(dest, SAMPLES_FILE), build_samples(feed, mode, samples, results))
    return dest

if __name__ == "__main__":
    print("This module is not meant to be run directly")
