"""
explorer_metrics.py — Aggregations behind the explorer pages.

Every function takes the index arrays as loaded from JSON (lists of dicts) and
returns plain Python structures ready for Plotly or st.dataframe. Cancelled
orders never count towards volume.
"""

import numpy as np
import pandas as pd

from build_indexes import NO_STATE
from formatters import censor_id_document, censor_name

CANCELLED = "CANCELLED"
ORDER_COLUMNS = ["id", "identifierNumber", "amount", "status", "channel", "customerName", "createdAt"]

TICKET_BUCKETS = ["< $50", "$50 - $100", "$100 - $300", "$300 - $500", "> $500"]
TICKET_EDGES = [-np.inf, 50, 100, 300, 500, np.inf]
FREQUENCY_LABELS = {1: "1 compra", 2: "2 compras", 3: "3 compras", 4: "4+ compras"}


def orders_frame(orders):
    """Orders index as a DataFrame with numeric amounts and parsed UTC timestamps."""
    df = pd.DataFrame(list(orders), columns=ORDER_COLUMNS, dtype=object)
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0)
    df["created"] = pd.to_datetime(df["createdAt"], errors="coerce", utc=True, format="ISO8601")
    df["cancelled"] = df["status"] == CANCELLED
    return df


def _with_month(df):
    dated = df[df["created"].notna()].copy()
    dated["month"] = dated["created"].dt.strftime("%Y-%m")
    return dated


def _with_client(df):
    ident = df["identifierNumber"]
    return df[ident.notna() & ident.astype(bool)]


# ═══════════════════════════════════════════════════════════════════════════
#  Dashboard
# ═══════════════════════════════════════════════════════════════════════════
def dashboard_kpis(merchants, orders):
    df = orders_frame(orders)
    active = df[~df["cancelled"]]
    total_orders = len(df)
    total_volume = float(active["amount"].sum())
    cancelled = int(df["cancelled"].sum())
    return {
        "total_orders": total_orders,
        "total_volume": total_volume,
        "active_merchants": sum(1 for m in merchants if m.get("enabled")),
        "total_merchants": len(merchants),
        "avg_ticket": total_volume / len(active) if len(active) > 0 else 0,
        "cancelled_orders": cancelled,
        "cancel_rate": cancelled / total_orders * 100 if total_orders > 0 else 0,
    }


def status_breakdown(orders):
    counts = orders_frame(orders)["status"].fillna("UNKNOWN").value_counts()
    return [{"name": name, "value": int(v)} for name, v in counts.items()]


def channel_volume(orders, limit=5):
    df = orders_frame(orders)
    active = df[~df["cancelled"]]
    volume = (
        active.groupby(active["channel"].fillna("UNKNOWN"))["amount"]
        .sum()
        .sort_values(ascending=False)
        .head(limit)
    )
    return [{"name": name, "total": float(v)} for name, v in volume.items()]


# ═══════════════════════════════════════════════════════════════════════════
#  Analytics
# ═══════════════════════════════════════════════════════════════════════════
def aov_over_time(orders):
    df = orders_frame(orders)
    dated = _with_month(df[~df["cancelled"]])
    rows = []
    for month, grp in dated.groupby("month"):
        total = float(grp["amount"].sum())
        rows.append({"month": month, "aov": round(total / len(grp), 2), "volume": round(total, 2)})
    return rows


def ticket_size_distribution(orders):
    df = orders_frame(orders)
    amounts = df.loc[~df["cancelled"], "amount"].astype(float)
    if amounts.empty:
        return [{"range": label, "count": 0} for label in TICKET_BUCKETS]
    buckets = pd.cut(amounts, bins=TICKET_EDGES, labels=TICKET_BUCKETS, right=False)
    counts = buckets.value_counts().reindex(TICKET_BUCKETS, fill_value=0)
    return [{"range": label, "count": int(v)} for label, v in counts.items()]


def top_channels(orders, limit=10):
    df = orders_frame(orders)
    channel = df["channel"]
    active = df[~df["cancelled"] & channel.notna() & (channel != "")]
    counts = active["channel"].value_counts().head(limit)
    return [{"name": name, "count": int(v)} for name, v in counts.items()]


def hourly_activity(orders):
    hours = orders_frame(orders)["created"].dropna().dt.hour.value_counts()
    return [{"hour": f"{h:02d}:00", "count": int(hours.get(h, 0))} for h in range(24)]


def risk_over_time(orders):
    """Approved vs cancelled amount per month."""
    dated = _with_month(orders_frame(orders))
    rows = []
    for month, grp in dated.groupby("month"):
        rows.append({
            "month": month,
            "approved": float(grp.loc[~grp["cancelled"], "amount"].sum()),
            "cancelled": float(grp.loc[grp["cancelled"], "amount"].sum()),
        })
    return rows


def merchant_state_counts(merchants):
    states = pd.Series([m.get("state") or NO_STATE for m in merchants], dtype=object)
    return [{"name": name, "value": int(v)} for name, v in states.value_counts().items()]


# ═══════════════════════════════════════════════════════════════════════════
#  Clients
# ═══════════════════════════════════════════════════════════════════════════
def _first_name(names):
    names = names.dropna()
    names = names[names.astype(bool)]
    return names.iloc[0] if len(names) > 0 else None


def client_summaries(orders, include_cancelled_clients=True):
    """One row per customer, sorted by non-cancelled volume descending.

    With include_cancelled_clients=False customers whose orders were all
    cancelled are left out.
    """
    df = _with_client(orders_frame(orders))
    rows = []
    for ident, grp in df.groupby("identifierNumber", sort=False):
        active = grp[~grp["cancelled"]]
        if not include_cancelled_clients and active.empty:
            continue
        rows.append({
            "identifierNumber": ident,
            "name": _first_name(grp["customerName"]) or f"Cliente {ident}",
            "volume": float(active["amount"].sum()),
            "ordersCount": int(len(active)),
        })
    rows.sort(key=lambda r: r["volume"], reverse=True)
    return rows


def purchase_frequency(orders):
    df = _with_client(orders_frame(orders))
    per_client = df[~df["cancelled"]].groupby("identifierNumber").size()
    counts = per_client.clip(upper=4).value_counts()
    return [{"name": label, "value": int(counts.get(n, 0))} for n, label in FREQUENCY_LABELS.items()]


def client_profile(orders, identifier_number):
    """Orders of one customer (newest first) plus approved/cancelled totals."""
    orders = list(orders)
    df = orders_frame(orders)
    mine = df[df["identifierNumber"] == identifier_number]
    if mine.empty:
        return None
    mine = mine.sort_values("created", ascending=False, na_position="last", kind="stable")
    active = mine[~mine["cancelled"]]
    return {
        "identifierNumber": identifier_number,
        "name": _first_name(mine["customerName"]) or f"Cliente {identifier_number}",
        "orders": [orders[i] for i in mine.index],
        "approved": int(len(active)),
        "cancelled": int(mine["cancelled"].sum()),
        "total_volume": float(active["amount"].sum()),
    }


def search_clients(summaries, term):
    if not term:
        return list(summaries)
    term = term.lower()
    found = []
    for client in summaries:
        ident = str(client["identifierNumber"])
        if (term in client["name"].lower()
                or term in censor_name(client["name"]).lower()
                or term in ident
                or term in censor_id_document(ident).lower()):
            found.append(client)
    return found


# ═══════════════════════════════════════════════════════════════════════════
#  List filters
# ═══════════════════════════════════════════════════════════════════════════
def _id_text(value):
    return "" if value is None else str(value)


def filter_merchants(merchants, term="", enabled="ALL", state=None):
    term_lower = term.lower()
    found = []
    for m in merchants:
        matches_search = (
            term_lower in (m.get("name") or "").lower()
            or term in _id_text(m.get("id"))
            or term_lower in (m.get("category") or "").lower()
        )
        if enabled == "ACTIVE":
            matches_filter = m.get("enabled") is True
        elif enabled == "INACTIVE":
            matches_filter = m.get("enabled") is False
        else:
            matches_filter = True
        if state:
            matches_filter = matches_filter and m.get("state") == state
        if matches_search and matches_filter:
            found.append(m)
    return found


def filter_orders(orders, term="", status="ALL", limit=100):
    term_lower = term.lower()
    found = []
    for o in orders:
        matches_search = (
            term in _id_text(o.get("id"))
            or term in _id_text(o.get("identifierNumber"))
            or term_lower in (o.get("customerName") or "").lower()
        )
        if matches_search and (status == "ALL" or o.get("status") == status):
            found.append(o)
            if limit is not None and len(found) >= limit:
                break
    return found


def filter_stores(stores, term="", type_="ALL"):
    return [
        s for s in stores
        if term in _id_text(s.get("id")) and (type_ == "ALL" or type_ in s.get("types", []))
    ]


def available_statuses(orders):
    return ["ALL"] + sorted({o["status"] for o in orders if o.get("status")})


def available_types(stores):
    return ["ALL"] + sorted({t for s in stores for t in s.get("types", [])})
