#!/usr/bin/env python3
"""
Load generator for the audnet auction endpoint.

Sends randomized OpenRTB bid requests (mixed app / site inventory, mixed
modern and legacy placement params, a share of invalid impressions) and
reports latency plus how many bids and errors came back.

Usage:
    python scripts/benchmark.py --url http://localhost:8000 --concurrency 50 --requests 1000
"""

import argparse
import asyncio
import random
import statistics
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Any

import httpx

from audnet.common.config import LoggingSettings
from audnet.common.logger import get_logger, setup_logging
from audnet.common.utils import json_dumps

logger = get_logger(__name__)


@dataclass
class BenchmarkResult:
    """Results from a benchmark run."""

    total_requests: int
    successful_requests: int
    failed_requests: int
    total_bids: int
    total_errors: int
    total_time: float
    avg_latency_ms: float
    p50_latency_ms: float
    p95_latency_ms: float
    p99_latency_ms: float
    requests_per_second: float


@dataclass
class CallOutcome:
    """Outcome of one auction call."""

    ok: bool
    latency_ms: float
    bids: int = 0
    errors: int = 0


def generate_imp(index: int) -> dict[str, Any]:
    """Generate an impression with modern, legacy or invalid params."""
    placement = str(random.randint(1000, 9999))
    publisher = str(random.randint(100, 999))
    style = random.choices(["modern", "legacy", "invalid"], weights=[6, 3, 1])[0]

    if style == "modern":
        bidder = {"placementId": placement, "publisherId": publisher}
    elif style == "legacy":
        bidder = {"placementId": f"{publisher}_{placement}"}
    else:
        bidder = {"placementId": f"{publisher}_{placement}_x"}

    return {
        "id": str(index + 1),
        "banner": {"format": [{"w": 320, "h": 50}, {"w": 300, "h": 250}]},
        "ext": {"bidder": bidder},
    }


def generate_bid_request() -> dict[str, Any]:
    """Generate a random bid request."""
    request: dict[str, Any] = {
        "id": str(uuid.uuid4()),
        "imp": [generate_imp(i) for i in range(random.randint(1, 4))],
        "device": {
            "ua": "Mozilla/5.0",
            "ip": f"203.0.113.{random.randint(1, 254)}",
            "os": random.choice(["android", "ios"]),
        },
        "tmax": 500,
    }
    if random.random() < 0.7:
        request["app"] = {"bundle": f"com.example.app{random.randint(1, 50)}"}
    else:
        request["site"] = {"page": f"https://news{random.randint(1, 50)}.example.com"}
    return request


async def make_request(client: httpx.AsyncClient, url: str) -> CallOutcome:
    """Make a single auction call."""
    start_time = time.perf_counter()
    try:
        response = await client.post(
            url,
            content=json_dumps(generate_bid_request()),
            headers={"Content-Type": "application/json"},
        )
    except httpx.HTTPError as e:
        logger.debug("Auction call failed", error=str(e))
        return CallOutcome(ok=False, latency_ms=(time.perf_counter() - start_time) * 1000)

    latency_ms = (time.perf_counter() - start_time) * 1000
    if response.status_code != 200:
        return CallOutcome(ok=False, latency_ms=latency_ms)

    data = response.json()
    return CallOutcome(
        ok=True,
        latency_ms=latency_ms,
        bids=len(data.get("bids", [])),
        errors=len(data.get("errors", [])),
    )


async def worker(
    client: httpx.AsyncClient,
    url: str,
    num_requests: int,
    results: list[CallOutcome],
) -> None:
    """Worker coroutine that makes requests."""
    for _ in range(num_requests):
        results.append(await make_request(client, url))


async def run_benchmark(
    base_url: str,
    concurrency: int,
    total_requests: int,
    timeout: float = 30.0,
) -> BenchmarkResult:
    """Run benchmark with specified concurrency."""
    url = f"{base_url.rstrip('/')}/api/v1/auction/bid"

    logger.info(
        "Starting benchmark",
        url=url,
        requests=total_requests,
        concurrency=concurrency,
    )

    requests_per_worker = total_requests // concurrency
    extra_requests = total_requests % concurrency

    results: list[CallOutcome] = []

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        limits=httpx.Limits(
            max_keepalive_connections=concurrency,
            max_connections=concurrency * 2,
        ),
    ) as client:
        start_time = time.perf_counter()

        workers = []
        for i in range(concurrency):
            num = requests_per_worker + (1 if i < extra_requests else 0)
            workers.append(worker(client, url, num, results))

        await asyncio.gather(*workers)

        total_time = time.perf_counter() - start_time

    latencies = sorted(r.latency_ms for r in results)
    successful = sum(1 for r in results if r.ok)

    def percentile(p: float) -> float:
        if not latencies:
            return 0.0
        idx = int(len(latencies) * p)
        return latencies[min(idx, len(latencies) - 1)]

    return BenchmarkResult(
        total_requests=len(results),
        successful_requests=successful,
        failed_requests=len(results) - successful,
        total_bids=sum(r.bids for r in results),
        total_errors=sum(r.errors for r in results),
        total_time=total_time,
        avg_latency_ms=statistics.mean(latencies) if latencies else 0.0,
        p50_latency_ms=percentile(0.50),
        p95_latency_ms=percentile(0.95),
        p99_latency_ms=percentile(0.99),
        requests_per_second=len(results) / total_time if total_time else 0.0,
    )


def print_results(result: BenchmarkResult) -> None:
    """Print benchmark results."""
    print("\n" + "=" * 60)
    print("BENCHMARK RESULTS")
    print("=" * 60)

    print("\nRequests:")
    print(f"  Total:      {result.total_requests}")
    print(f"  Successful: {result.successful_requests}")
    print(f"  Failed:     {result.failed_requests}")

    print("\nAuction:")
    print(f"  Bids:       {result.total_bids}")
    print(f"  Errors:     {result.total_errors}")

    print("\nThroughput:")
    print(f"  Total Time: {result.total_time:.2f}s")
    print(f"  RPS:        {result.requests_per_second:.2f}")

    print("\nLatency (ms):")
    print(f"  Avg:  {result.avg_latency_ms:.2f}")
    print(f"  P50:  {result.p50_latency_ms:.2f}")
    print(f"  P95:  {result.p95_latency_ms:.2f}")
    print(f"  P99:  {result.p99_latency_ms:.2f}")

    print("\n" + "=" * 60)


async def main_async(args: argparse.Namespace) -> None:
    """Async main function."""
    health_url = f"{args.url.rstrip('/')}/health"
    async with httpx.AsyncClient(timeout=10.0) as client:
        try:
            response = await client.get(health_url)
        except httpx.HTTPError as e:
            logger.error("Cannot connect to server", error=str(e))
            return

    if response.status_code != 200:
        logger.error("Server health check failed", status_code=response.status_code)
        return
    if not response.json().get("configured"):
        logger.warning("Adapter has no platform id; every auction will return a config error")

    result = await run_benchmark(
        base_url=args.url,
        concurrency=args.concurrency,
        total_requests=args.requests,
        timeout=args.timeout,
    )

    print_results(result)

    if args.output:
        with open(args.output, "w") as f:
            f.write(json_dumps(asdict(result)))
        logger.info("Results saved", path=args.output)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Benchmark the audnet auction endpoint")
    parser.add_argument("--url", type=str, default="http://localhost:8000", help="Base URL of the server")
    parser.add_argument("--concurrency", "-c", type=int, default=50, help="Number of concurrent workers")
    parser.add_argument("--requests", "-n", type=int, default=1000, help="Total number of requests")
    parser.add_argument("--timeout", type=float, default=30.0, help="Request timeout in seconds")
    parser.add_argument("--output", "-o", type=str, default=None, help="Output file for results (JSON)")

    args = parser.parse_args()

    setup_logging(LoggingSettings(format="console"))
    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
