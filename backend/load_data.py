"""
Data Loader Script - Loads students.json into the Students API.

Reads a JSON array of {FirstName, LastName, Program} records and POSTs each
one to /Students.

Usage:
    python load_data.py                              # Uses default URL
    python load_data.py http://localhost:8000         # Custom API URL
"""

import json
import sys
import os

import httpx


def load_students(client: httpx.Client, records: list) -> dict:
    """
    POST every record to /Students and collect a summary.

    Returns a dict with counts of created and rejected records and a
    per-record detail list.
    """
    created = 0
    rejected = 0
    details = []

    for index, record in enumerate(records):
        resp = client.post("/Students", json=record)
        if resp.status_code == 201:
            created += 1
            details.append({"index": index, "status": "CREATED", "id": resp.json()["id"]})
        else:
            rejected += 1
            details.append({"index": index, "status": "REJECTED", "status_code": resp.status_code})

    return {"total": len(records), "created": created, "rejected": rejected, "details": details}


def main():
    api_url = sys.argv[1] if len(sys.argv) > 1 else os.getenv("API_URL", "http://localhost:8000")

    data_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), "students.json")
    if not os.path.exists(data_file):
        data_file = "students.json"

    if not os.path.exists(data_file):
        print("Error: Could not find students.json")
        sys.exit(1)

    print(f"Loading data from: {data_file}")
    with open(data_file, 'r') as f:
        records = json.load(f)

    print(f"Found {len(records)} students to create")
    print(f"Sending to: {api_url}/Students")
    print()

    with httpx.Client(base_url=api_url, timeout=30.0) as client:
        result = load_students(client, records)

    print("=" * 60)
    print("LOAD SUMMARY")
    print("=" * 60)
    print(f"  Total:     {result['total']}")
    print(f"  Created:   {result['created']}")
    print(f"  Rejected:  {result['rejected']}")
    print("=" * 60)
    print()

    for d in result["details"]:
        if d["status"] == "CREATED":
            print(f"  #{d['index']}: CREATED ({d['id']})")
        else:
            print(f"  #{d['index']}: REJECTED (HTTP {d['status_code']})")


if __name__ == "__main__":
    main()
