#!/usr/bin/env python3

def get_feed():
    # Viasat keeps its geofeed in a public GitHub repo
    return {
        "name": "viasat",
        "pretty": "Viasat",
        "url": "https://raw.githubusercontent.com/Viasat/geofeed/main/geofeed.csv",
    }

if __name__ == "__main__":
    print("This module is not meant to be run directly")
