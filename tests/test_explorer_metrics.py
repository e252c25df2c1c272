import pytest

from explorer_metrics import (
    aov_over_time,
    available_statuses,
    available_types,
    channel_volume,
    client_profile,
    client_summaries,
    dashboard_kpis,
    filter_merchants,
    filter_orders,
    filter_stores,
    hourly_activity,
    merchant_state_counts,
    purchase_frequency,
    risk_over_time,
    search_clients,
    status_breakdown,
    ticket_size_distribution,
    top_channels,
)

ORDERS = [
    {"id": "1", "identifierNumber": 111, "amount": 40, "status": "CLOSED", "channel": "IN_APP",
     "customerName": None, "createdAt": "2024-01-05T10:15:00Z"},
    {"id": "2", "identifierNumber": 111, "amount": 120, "status": "OPEN", "channel": "IN_STORE",
     "customerName": "Ana Perez", "createdAt": "2024-01-20T10:45:00Z"},
    {"id": "3", "identifierNumber": 222, "amount": 600, "status": "CANCELLED", "channel": "IN_APP",
     "customerName": "Luis Gil", "createdAt": "2024-02-01T18:00:00Z"},
    {"id": "4", "identifierNumber": 333, "amount": 50, "status": "CLOSED", "channel": "IN_APP",
     "customerName": "Eva Rios", "createdAt": "2024-02-10T18:30:00Z"},
    {"id": "5", "identifierNumber": 333, "amount": 300, "status": "CLOSED", "channel": None,
     "customerName": "Eva Rios", "createdAt": None},
]

MERCHANTS = [
    {"id": 1, "name": "Farmacia Central", "category": "Salud", "enabled": True, "state": "Distrito Capital"},
    {"id": 22, "name": "Moda Caribe", "category": "Ropa", "enabled": False, "state": "Nueva Esparta"},
    {"id": 3, "name": "Ferreteria Sol", "category": None, "enabled": True, "state": "Distrito Capital"},
]

STORES = [
    {"id": 42, "methodCount": 3, "types": ["MOBILE", "OTRO"]},
    {"id": 7, "methodCount": 1, "types": ["TRANSFER"]},
    {"id": None, "methodCount": 0, "types": []},
]


def test_dashboard_kpis():
    kpis = dashboard_kpis(MERCHANTS, ORDERS)
    assert kpis["total_orders"] == 5
    assert kpis["total_volume"] == 510
    assert kpis["avg_ticket"] == pytest.approx(127.5)
    assert kpis["cancelled_orders"] == 1
    assert kpis["cancel_rate"] == pytest.approx(20.0)
    assert kpis["active_merchants"] == 2
    assert kpis["total_merchants"] == 3


def test_dashboard_kpis_without_data():
    kpis = dashboard_kpis([], [])
    assert kpis["total_orders"] == 0
    assert kpis["avg_ticket"] == 0
    assert kpis["cancel_rate"] == 0


def test_status_breakdown():
    breakdown = status_breakdown(ORDERS)
    assert breakdown[0] == {"name": "CLOSED", "value": 3}
    assert {b["name"] for b in breakdown} == {"CLOSED", "OPEN", "CANCELLED"}


def test_channel_volume_excludes_cancelled():
    assert channel_volume(ORDERS, limit=2) == [
        {"name": "UNKNOWN", "total": 300.0},
        {"name": "IN_STORE", "total": 120.0},
    ]
    assert {"name": "IN_APP", "total": 90.0} in channel_volume(ORDERS)


def test_aov_over_time():
    assert aov_over_time(ORDERS) == [
        {"month": "2024-01", "aov": 80.0, "volume": 160.0},
        {"month": "2024-02", "aov": 50.0, "volume": 50.0},
    ]


def test_ticket_size_distribution():
    assert ticket_size_distribution(ORDERS) == [
        {"range": "< $50", "count": 1},
        {"range": "$50 - $100", "count": 1},
        {"range": "$100 - $300", "count": 1},
        {"range": "$300 - $500", "count": 1},
        {"range": "> $500", "count": 0},
    ]
    assert [b["count"] for b in ticket_size_distribution([])] == [0, 0, 0, 0, 0]


def test_top_channels():
    assert top_channels(ORDERS) == [{"name": "IN_APP", "count": 2}, {"name": "IN_STORE", "count": 1}]


def test_hourly_activity():
    hours = hourly_activity(ORDERS)
    assert len(hours) == 24
    assert hours[10] == {"hour": "10:00", "count": 2}
    assert hours[18] == {"hour": "18:00", "count": 2}
    assert sum(h["count"] for h in hours) == 4


def test_risk_over_time():
    assert risk_over_time(ORDERS) == [
        {"month": "2024-01", "approved": 160.0, "cancelled": 0.0},
        {"month": "2024-02", "approved": 50.0, "cancelled": 600.0},
    ]


def test_client_summaries():
    summaries = client_summaries(ORDERS)
    assert [c["identifierNumber"] for c in summaries] == [333, 111, 222]
    assert summaries[1] == {"identifierNumber": 111, "name": "Ana Perez", "volume": 160.0, "ordersCount": 2}
    assert summaries[2]["ordersCount"] == 0

    top = client_summaries(ORDERS, include_cancelled_clients=False)
    assert [c["identifierNumber"] for c in top] == [333, 111]


def test_client_without_name_gets_placeholder():
    [summary] = client_summaries([{"id": "x", "identifierNumber": 9, "amount": 5, "status": "OPEN"}])
    assert summary["name"] == "Cliente 9"


def test_purchase_frequency():
    assert purchase_frequency(ORDERS) == [
        {"name": "1 compra", "value": 0},
        {"name": "2 compras", "value": 2},
        {"name": "3 compras", "value": 0},
        {"name": "4+ compras", "value": 0},
    ]


def test_client_profile():
    profile = client_profile(ORDERS, 111)
    assert [o["id"] for o in profile["orders"]] == ["2", "1"]
    assert profile["name"] == "Ana Perez"
    assert profile["approved"] == 2
    assert profile["cancelled"] == 0
    assert profile["total_volume"] == 160.0

    assert [o["id"] for o in client_profile(ORDERS, 333)["orders"]] == ["4", "5"]
    assert client_profile(ORDERS, 999) is None


def test_search_clients_matches_raw_and_censored_values():
    summaries = client_summaries(ORDERS)
    assert [c["identifierNumber"] for c in search_clients(summaries, "ana")] == [111]
    assert [c["identifierNumber"] for c in search_clients(summaries, "P****")] == [111]
    assert [c["identifierNumber"] for c in search_clients(summaries, "33")] == [333]
    assert search_clients(summaries, "") == summaries


def test_filter_merchants():
    assert [m["id"] for m in filter_merchants(MERCHANTS, "f")] == [1, 3]
    assert [m["id"] for m in filter_merchants(MERCHANTS, "ropa")] == [22]
    assert [m["id"] for m in filter_merchants(MERCHANTS, "2")] == [22]
    assert [m["id"] for m in filter_merchants(MERCHANTS, enabled="INACTIVE")] == [22]
    assert [m["id"] for m in filter_merchants(MERCHANTS, enabled="ACTIVE", state="Distrito Capital")] == [1, 3]


def test_filter_orders():
    assert [o["id"] for o in filter_orders(ORDERS, "eva")] == ["4", "5"]
    assert [o["id"] for o in filter_orders(ORDERS, status="CANCELLED")] == ["3"]
    assert len(filter_orders(ORDERS, limit=2)) == 2


def test_filter_stores():
    assert [s["id"] for s in filter_stores(STORES, "4")] == [42]
    assert [s["id"] for s in filter_stores(STORES, type_="TRANSFER")] == [7]
    assert len(filter_stores(STORES)) == 3


def test_available_options():
    assert available_statuses(ORDERS) == ["ALL", "CANCELLED", "CLOSED", "OPEN"]
    assert available_types(STORES) == ["ALL", "MOBILE", "OTRO", "TRANSFER"]


def test_merchant_state_counts():
    counts = merchant_state_counts(MERCHANTS + [{"id": 9}])
    assert counts[0] == {"name": "Distrito Capital", "value": 2}
    assert {"name": "Desconocido", "value": 1} in counts
