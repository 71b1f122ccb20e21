#!/usr/bin/env python3

from datetime import datetime, timedelta
import sys
if sys.version_info >= (3, 11): from datetime import UTC
else: import datetime as datetime_fix; UTC=datetime_fix.timezone.utc

def _now():
    return datetime.now(UTC).replace(tzinfo=None)

class DelayMsg:
    # Progress reporter for long loops, only lets a message through every
    # 'delay' seconds so a few thousand API calls don't flood the console
    def __init__(self, key=None, delay=5, show_all=False, file=None):
        self.key = key
        self.file = file
        self.next_msg = _now()
        self.delay = delay
        self.show_all = show_all

    def __call__(self, value):
        self.show(value)

    def __enter__(self):
        return self

    def __exit__(self, *args, **kargs):
        pass

    def show(self, value):
        now = _now()
        if now >= self.next_msg or self.show_all:
            self.force(value)

    def force(self, value):
        now = _now()
        show(value, key=self.key, file=self.file)
        while now >= self.next_msg:
            self.next_msg += timedelta(seconds=self.delay)

def show(value, key=None, file=None):
    if key is not None:
        value = f"[{key}] {value}"
    msg = f'{_now().strftime("%d %H:%M:%S")}: {value}'
    if file is None:
        file = sys.stdout
    print(msg, file=file, flush=True)
    return msg

def warn(value, key=None, file=None):
    return show("WARNING: " + value, key=key, file=file)

def error(value, key=None, file=None):
    return show("ERROR: " + value, key=key, file=file)

if __name__ == '__main__':
    print("This module is not meant to be run directly")
