"""
data_loader.py — Session-scoped access to the generated index files and source documents.

Each IndexCache memoizes parsed files per relative path for as long as the
instance lives. The dashboard keeps one per Streamlit session, tests create
their own, so nothing leaks between them.
"""

import json
import os

from build_indexes import PUBLIC


class IndexCache:
    def __init__(self, base_dir=PUBLIC):
        self.base_dir = base_dir
        self._entries = {}

    def __contains__(self, relative_path):
        return relative_path in self._entries

    def __len__(self):
        return len(self._entries)

    def load(self, relative_path):
        """Parsed JSON for base_dir/relative_path; failures are not cached."""
        if relative_path not in self._entries:
            path = os.path.join(self.base_dir, relative_path)
            if not os.path.isfile(path):
                raise FileNotFoundError(f"No encontrado: {relative_path}")
            with open(path, "r", encoding="utf-8") as f:
                self._entries[relative_path] = json.load(f)
        return self._entries[relative_path]

    def clear(self):
        self._entries.clear()

    # ─── Index files ───────────────────────────────────────────────────────
    def merchants_index(self):
        return self.load("merchants_index.json")

    def stores_index(self):
        return self.load("stores_index.json")

    def orders_index(self):
        return self.load("orders_index.json")

    def payments_analytics(self):
        return self.load("payments_analytics.json")

    # ─── Source documents ──────────────────────────────────────────────────
    def merchant(self, merchant_id):
        return self.load(f"SAMPLE_MERCHANTS/{merchant_id}.json")

    def store(self, store_id):
        return self.load(f"SAMPLE_STORE/store_{store_id}.json")

    def client(self, identifier_number):
        return self.load(f"SAMPLE_CLIENT/{identifier_number}.json")
