"""
build_indexes.py — Pre-aggregate CASHEA sample documents into compact index files.

Usage:
    python build_indexes.py

Reads:  public/SAMPLE_MERCHANTS/*.json, public/SAMPLE_STORE/store_<id>.json,
        public/SAMPLE_CLIENT/*.json
Writes: public/{merchants_index,stores_index,orders_index}.json

A missing source directory skips that index (nothing is written for it).
Malformed merchant or store files abort the run; malformed client files are
skipped and counted.
"""

import json
import math
import os
import re
from dataclasses import dataclass

import numpy as np

from geo_states import VZLA_STATES, resolve_state

BASE = os.path.dirname(os.path.abspath(__file__))
PUBLIC = os.path.join(BASE, "public")
MERCHANTS_DIR = os.path.join(PUBLIC, "SAMPLE_MERCHANTS")
STORES_DIR = os.path.join(PUBLIC, "SAMPLE_STORE")
CLIENTS_DIR = os.path.join(PUBLIC, "SAMPLE_CLIENT")

MERCHANTS_INDEX = os.path.join(PUBLIC, "merchants_index.json")
STORES_INDEX = os.path.join(PUBLIC, "stores_index.json")
ORDERS_INDEX = os.path.join(PUBLIC, "orders_index.json")

NO_STATE = "Desconocido"
NO_TYPE = "OTRO"
STORE_PREFIX = "store_"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# ─── JSON encoder for the numpy counts pandas hands back ────────────────────
class NumpyEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        return super().default(obj)


def sanitize(obj):
    """Recursively replace NaN/Inf floats with None (JSON doesn't support NaN)."""
    if isinstance(obj, dict):
        return {k: sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize(v) for v in obj]
    if isinstance(obj, float) and (math.isnan(obj) or math.isinf(obj)):
        return None
    return obj


def write_json(path, data):
    """Serialize data to path, replacing whatever was there."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(sanitize(data), f, cls=NumpyEncoder, ensure_ascii=False)
    size = os.path.getsize(path)
    print(f"  {os.path.basename(path):30s} {size/1024:7.1f} KB")


def load_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


# ─── Readers ────────────────────────────────────────────────────────────────
@dataclass
class ParseResult:
    """Outcome of reading one source file: either data or the error raised."""

    path: str
    data: object = None
    error: Exception = None

    @property
    def ok(self):
        return self.error is None


def list_json_files(directory, prefix=""):
    return sorted(
        f for f in os.listdir(directory)
        if f.endswith(".json") and f.startswith(prefix)
    )


def read_merchant_files(directory):
    return [load_json(os.path.join(directory, f)) for f in list_json_files(directory)]


def read_store_files(directory):
    """Return (filename, payment methods) pairs for every store_<id>.json."""
    return [
        (f, load_json(os.path.join(directory, f)))
        for f in list_json_files(directory, STORE_PREFIX)
    ]


def read_client_files(directory):
    """Parse every client file, keeping failures as results instead of raising."""
    results = []
    for f in list_json_files(directory):
        path = os.path.join(directory, f)
        try:
            data = load_json(path)
        except (OSError, ValueError) as e:
            results.append(ParseResult(path, error=e))
            continue
        if not isinstance(data, dict):
            results.append(ParseResult(path, error=ValueError("expected a JSON object")))
            continue
        results.append(ParseResult(path, data=data))
    return results


# ─── Aggregators ────────────────────────────────────────────────────────────
def _as_dict(value):
    return value if isinstance(value, dict) else {}


def merchant_locations(merchant, regions=VZLA_STATES):
    locations = []
    for store in merchant.get("stores") or []:
        address = _as_dict(_as_dict(store).get("address"))
        lat, lng = address.get("lat"), address.get("long")
        # zero coordinates are dropped along with missing ones
        if not (lat and lng):
            continue
        locations.append({
            "lat": lat,
            "lng": lng,
            "name": address.get("name"),
            "state": resolve_state(lat, lng, regions),
        })
    return locations


def aggregate_merchants(raw_merchants, regions=VZLA_STATES):
    merchants = []
    for data in raw_merchants:
        locations = merchant_locations(data, regions)
        merchants.append({
            "id": data.get("id"),
            "name": data.get("name"),
            "category": data.get("category"),
            "enabled": data.get("enabled"),
            "type": data.get("type"),
            # main state is taken from the first located store only
            "state": locations[0]["state"] if locations else NO_STATE,
            "locations": locations,
        })
    return merchants


def parse_store_id(filename):
    """store_42.json -> 42; anything without leading digits -> NaN."""
    id_str = filename.replace(STORE_PREFIX, "", 1).replace(".json", "", 1)
    m = _LEADING_INT.match(id_str)
    return int(m.group(1)) if m else float("nan")


def aggregate_stores(raw_store_files):
    stores = []
    for filename, methods in raw_store_files:
        stores.append({
            "id": parse_store_id(filename),
            "methodCount": len(methods),
            "types": list(dict.fromkeys((m or {}).get("type") or NO_TYPE for m in methods)),
        })
    return stores


def aggregate_orders(results):
    orders = []
    for result in results:
        if isinstance(result, ParseResult):
            if not result.ok:
                continue
            data = result.data
        else:
            data = result
        user = _as_dict(_as_dict(data.get("paymentDetails")).get("user"))
        orders.append({
            "id": data.get("id"),
            "identifierNumber": data.get("identifierNumber"),
            "amount": data.get("amount") or 0,
            "status": data.get("status"),
            "channel": data.get("channel"),
            "customerName": user.get("fullName") or None,
            "createdAt": data.get("createdAt") or None,
        })
    return orders


# ─── Build steps ────────────────────────────────────────────────────────────
def build_merchants_index(src_dir=MERCHANTS_DIR, out_path=MERCHANTS_INDEX, regions=VZLA_STATES):
    if not os.path.isdir(src_dir):
        print(f"  {src_dir} not found, skipping merchants")
        return None
    merchants = aggregate_merchants(read_merchant_files(src_dir), regions)
    write_json(out_path, merchants)
    print(f"  Created {os.path.basename(out_path)} with geocoded states for {len(merchants):,} records")
    return merchants


def build_stores_index(src_dir=STORES_DIR, out_path=STORES_INDEX):
    if not os.path.isdir(src_dir):
        print(f"  {src_dir} not found, skipping stores")
        return None
    stores = aggregate_stores(read_store_files(src_dir))
    write_json(out_path, stores)
    print(f"  Created {os.path.basename(out_path)} with {len(stores):,} records")
    return stores


def build_orders_index(src_dir=CLIENTS_DIR, out_path=ORDERS_INDEX):
    if not os.path.isdir(src_dir):
        print(f"  {src_dir} not found, skipping orders")
        return None
    results = read_client_files(src_dir)
    orders = aggregate_orders(results)
    write_json(out_path, orders)
    print(f"  Created {os.path.basename(out_path)} with {len(orders):,} records")
    skipped = [r for r in results if not r.ok]
    if skipped:
        print(f"  Skipped {len(skipped):,} unreadable client files")
    return orders


def main():
    print("Building merchants index...")
    build_merchants_index()
    print("Building stores index...")
    build_stores_index()
    print("Building orders index...")
    build_orders_index()
    print("\nDone!")


if __name__ == "__main__":
    main()
