"""
NFR: creation throughput with generated codes

How to run (opt-in):
    RUN_NFR=1 pytest tests/nfr/test_perf_create.py -vv

Optional thresholds (env):
    NFR_CREATES=5000
    NFR_TARGET_CREATE_QPS=500
    RUN_NFR_STRICT=1
"""

import os
import time

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink_platform.storage.storage import Storage

pytestmark = pytest.mark.nfr


def _should_run():
    return os.getenv("RUN_NFR") == "1"


@pytest.mark.skipif(not _should_run(), reason="NFR tests are opt-in; set RUN_NFR=1 to enable")
def test_create_throughput_and_uniqueness(capsys):
    storage = Storage()
    client = TestClient(create_app(storage=storage))
    n = int(os.getenv("NFR_CREATES", "5000"))

    codes = set()
    t0 = time.perf_counter()
    for i in range(n):
        r = client.post("/api/links", json={"targetUrl": f"https://example.com/item/{i}"})
        assert r.status_code == 201
        codes.add(r.json()["link"]["shortCode"])
    elapsed = time.perf_counter() - t0

    qps = n / elapsed if elapsed > 0 else float("inf")
    with capsys.disabled():
        print(f"\ncreates={n} qps={qps:.1f}")

    assert len(codes) == n
    assert storage.count_links() == n

    if os.getenv("RUN_NFR_STRICT") == "1":
        assert qps >= float(os.getenv("NFR_TARGET_CREATE_QPS", "500"))
