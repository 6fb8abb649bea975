"""
write_load.py - async load script that creates short links and audits the result

Usage:
  python write_load.py --base http://127.0.0.1:8000 --count 2000 --concurrency 100 \
      --custom-ratio 0.1 --out links_created.jsonl

Outcomes are tallied by status: 201 created, 400 rejected input, 409 custom
code conflict, 500 allocation exhausted, 503 store unavailable, "net" for
transport errors. `totalLinks` on /healthz is read before and after the run;
its delta should equal the number of 201s when nothing else writes meanwhile.

With --custom-ratio > 0 a share of requests asks for a custom code drawn from
a small pool, so some of them are expected to answer 409.
"""
import argparse
import asyncio
import json
import random
import string
import time
from collections import Counter
from datetime import datetime, timezone

import httpx

CODE_ALPHABET = string.ascii_letters + string.digits

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _target_url(idx):
    scheme = random.choice(["https", "https", "https", "http", "ftp"])
    host = random.choice(["example.com", "sample.net", "demo.org", "test.io"])
    path = "".join(random.choice(CODE_ALPHABET) for _ in range(8))
    return f"{scheme}://{host}/{path}?q={idx}"

def _custom_pool(size):
    # Fixed 7-char codes never match a generated 6-char one
    return ["load" + "".join(random.choice(string.digits) for _ in range(3)) for _ in range(size)]

async def _create_one(client: httpx.AsyncClient, base: str, url: str, code=None):
    payload = {"targetUrl": url}
    if code:
        payload["shortCode"] = code
    try:
        r = await client.post(f"{base}/api/links", json=payload, timeout=10)
    except httpx.HTTPError:
        return "net", None
    if r.status_code != 201:
        return str(r.status_code), None
    try:
        return "201", r.json()["link"]["shortCode"]
    except (ValueError, KeyError):
        return "bad-body", None

async def _total_links(client: httpx.AsyncClient, base: str):
    try:
        r = await client.get(f"{base}/healthz", timeout=10)
        return r.json().get("totalLinks")
    except (httpx.HTTPError, ValueError):
        return None

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--count", type=int, default=2000)
    parser.add_argument("--concurrency", type=int, default=100)
    parser.add_argument("--custom-ratio", type=float, default=0.0,
                        help="Share of requests that ask for a custom code (0..1)")
    parser.add_argument("--custom-pool", type=int, default=50,
                        help="Number of distinct custom codes to draw from")
    parser.add_argument("--out", default="links_created.jsonl")
    args = parser.parse_args()

    pool = _custom_pool(max(args.custom_pool, 1))
    outcomes = Counter()

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    with open(args.out, "w", encoding="utf-8") as out_f:
        async with httpx.AsyncClient(limits=limit) as client:
            links_before = await _total_links(client, args.base)
            start_iso = _now_iso()
            t0 = time.perf_counter()
            sem = asyncio.Semaphore(args.concurrency)

            async def _task(i):
                url = _target_url(i)
                code = random.choice(pool) if random.random() < args.custom_ratio else None
                async with sem:
                    outcome, created = await _create_one(client, args.base, url, code)
                outcomes[outcome] += 1
                if created:
                    out_f.write(json.dumps({"code": created, "url": url}) + "\n")

            await asyncio.gather(*(_task(i) for i in range(args.count)))
            dt = time.perf_counter() - t0
            end_iso = _now_iso()
            links_after = await _total_links(client, args.base)

    created = outcomes["201"]
    print(f"START: {start_iso}")
    print(f"END:   {end_iso}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   writes={args.count}, created={created}, fail={args.count - created}")
    print("CODES: " + ", ".join(f"{k}={v}" for k, v in sorted(outcomes.items())))
    if dt > 0:
        print(f"TPS:   {created/dt:.1f} req/s")
    if links_before is None or links_after is None:
        print("LINKS: /healthz unavailable, totals not checked")
    else:
        delta = links_after - links_before
        verdict = "OK" if delta == created else "MISMATCH"
        print(f"LINKS: before={links_before}, after={links_after}, delta={delta}, created={created} [{verdict}]")

if __name__ == "__main__":
    asyncio.run(main())
