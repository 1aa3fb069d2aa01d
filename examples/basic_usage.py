# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Basic usage example for the OpenRTB inspector.

Demonstrates:
- Analyzing a single bid request
- Forcing CTV rules and the eq partner profile
- Reading a bulk file of requests
"""

import json

from ortb_inspector.engines import BidRequestAnalyzer, split_documents
from ortb_inspector.storage import InMemoryResultCache

BID_REQUEST = {
    "id": "example-001",
    "imp": [{"id": "1", "video": {"mimes": ["video/mp4"], "minduration": 5, "maxduration": 30}}],
    "app": {
        "id": "app-1",
        "bundle": "com.example.streamtv",
        "storeurl": "https://play.google.com/store/apps/details?id=com.example.streamtv",
        "publisher": {"id": "pub-1"},
    },
    "device": {"devicetype": 3, "ua": "Roku/DVP-12.0", "ip": "203.0.113.7", "geo": {"country": "USA"}},
    "tmax": 500,
}


def print_result(result):
    summary = result.summary
    print(f"   Request type: {summary.request_type.value} on {summary.platform.value}")
    print(f"   Device: {summary.device_type}, Geo: {summary.geo}, CTV: {summary.is_ctv}")
    print(f"   {len(result.errors)} error(s), {len(result.warnings)} warning(s), {len(result.infos)} info")
    for issue in result.issues:
        print(f"   - [{issue.severity.value}] {issue.id}: {issue.message}")


def main():
    """Run basic usage example."""
    print("=" * 60)
    print("OpenRTB Inspector - Basic Usage Example")
    print("=" * 60)

    analyzer = BidRequestAnalyzer(cache=InMemoryResultCache(max_entries=32))
    text = json.dumps(BID_REQUEST)

    # Step 1: Analyze with the default rule gating
    print("\n1. Analyzing a CTV request...")
    print_result(analyzer.analyze(text))

    # Step 2: Apply the eq partner profile
    print("\n2. Analyzing with the eq partner profile...")
    print_result(analyzer.analyze(text, partner_profile="eq"))

    # Step 3: Bulk input
    print("\n3. Analyzing a bulk stream...")
    stream = text + "\n" + json.dumps({"id": "example-002", "imp": []})
    for document in split_documents(stream):
        result = analyzer.analyze(document)
        print(f"   {result.request.get('id')}: {'valid' if result.is_valid else 'invalid'}")

    print("\n" + "=" * 60)
    print(f"Cached results: {len(analyzer.cache)}")
    print("=" * 60)


if __name__ == "__main__":
    main()
