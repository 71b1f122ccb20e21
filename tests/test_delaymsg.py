"""
Tests for delaymsg.py: console messages.

Run:
  pytest -q tests/test_delaymsg.py
"""

import io
import re

from delaymsg import DelayMsg, show, warn, error


def test_show_prefixes_time_and_key():
    out = io.StringIO()
    msg = show("hello", key="starlink", file=out)
    assert re.match(r"^\d\d \d\d:\d\d:\d\d: \[starlink\] hello$", msg)
    assert out.getvalue() == msg + "\n"


def test_warn_and_error():
    out = io.StringIO()
    warn("careful", key="viasat", file=out)
    error("broken", file=out)
    lines = out.getvalue().splitlines()
    assert lines[0].endswith("[viasat] WARNING: careful")
    assert lines[1].endswith(": ERROR: broken")


def test_delaymsg_rate_limits():
    out = io.StringIO()
    with DelayMsg(key="starlink", delay=3600, file=out) as msg:
        for i in range(10):
            msg(f"step {i}")
        msg.force("done")
    lines = out.getvalue().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("[starlink] step 0")
    assert lines[1].endswith("[starlink] done")


def test_delaymsg_show_all():
    out = io.StringIO()
    msg = DelayMsg(delay=3600, show_all=True, file=out)
    for i in range(3):
        msg(f"step {i}")
    assert len(out.getvalue().splitlines()) == 3
