#!/usr/bin/env python3

def get_feed():
    # SpaceX publishes where each of its prefixes lands, down to the city
    return {
        "name": "starlink",
        "pretty": "SpaceX Starlink",
        "url": "https://geoip.starlinkisp.net/feed.csv",
    }

if __name__ == "__main__":
    print("This module is not meant to be run directly")
