import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from data_loader import IndexCache
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
from formatters import censor_id_document, censor_name

st.set_page_config(
    page_title="CASHEA Data Explorer",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS
st.markdown("""
<style>
[data-testid="stMetric"] {
    background: linear-gradient(135deg, #1e1b4b 0%, #312e81 100%);
    padding: 15px 20px;
    border-radius: 10px;
    border-left: 4px solid #6366f1;
}
[data-testid="stMetricValue"] { font-size: 1.4rem; }
[data-testid="stMetricDelta"] { font-size: 0.85rem; }
div[data-testid="stHorizontalBlock"] > div { padding: 0 4px; }
</style>
""", unsafe_allow_html=True)

COLORS = ["#6366f1", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6", "#ec4899", "#14b8a6", "#0ea5e9"]
STATUS_COLORS = {
    "COMPLETED": "#10b981",
    "OPEN": "#3b82f6",
    "CANCELLED": "#ef4444",
    "CLOSED": "#6366f1",
    "IN_PROGRESS": "#f59e0b",
}
USERS_PER_PAGE = 20

# One cache per browser session; cleared only on demand.
if "index_cache" not in st.session_state:
    st.session_state["index_cache"] = IndexCache()
cache = st.session_state["index_cache"]


def load_or_empty(loader, empty):
    try:
        return loader()
    except FileNotFoundError as e:
        st.info(f"{e}. Ejecuta los scripts de build para generarlo.")
        return empty


def money(value):
    return f"${value:,.2f}"


# ==================== SIDEBAR ====================
st.sidebar.title("CASHEA Data Explorer")
page = st.sidebar.radio(
    "Seccion",
    ["Dashboard", "Comercios", "Tiendas", "Ordenes", "Usuarios", "Analitica"],
)
if st.sidebar.button("Recargar indices"):
    cache.clear()
    st.rerun()


# ==================== PAGE: DASHBOARD ====================
if page == "Dashboard":
    merchants = load_or_empty(cache.merchants_index, [])
    orders = load_or_empty(cache.orders_index, [])

    st.title("Dashboard de Inteligencia")
    kpis = dashboard_kpis(merchants, orders)

    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Volumen Operativo (Neto)", money(kpis["total_volume"]), help="Excluyendo canceladas")
    k2.metric("Ordenes Procesadas", f"{kpis['total_orders']:,}",
              delta=f"{kpis['cancelled_orders']:,} canceladas ({kpis['cancel_rate']:.1f}%)",
              delta_color="inverse")
    k3.metric("Ticket Promedio", money(kpis["avg_ticket"]), help="Por orden completada/activa")
    k4.metric("Merchants Activos", f"{kpis['active_merchants']:,}",
              help=f"De un total de {kpis['total_merchants']:,} registrados")

    st.divider()

    col_status, col_channel = st.columns(2)

    with col_status:
        st.subheader("Estado de Ordenes")
        status_df = pd.DataFrame(status_breakdown(orders))
        if not status_df.empty:
            fig_status = px.pie(status_df, values="value", names="name", hole=0.45,
                                color="name", color_discrete_map=STATUS_COLORS)
            fig_status.update_layout(height=400)
            st.plotly_chart(fig_status, key="status_chart")

    with col_channel:
        st.subheader("Top 5 Canales de Venta (Volumen $)")
        channel_df = pd.DataFrame(channel_volume(orders))
        if not channel_df.empty:
            fig_channel = px.bar(channel_df, x="name", y="total", color_discrete_sequence=["#6366f1"])
            fig_channel.update_layout(height=400, xaxis_title="", yaxis_title="Volumen ($)")
            st.plotly_chart(fig_channel, key="channel_chart")


# ==================== PAGE: COMERCIOS ====================
elif page == "Comercios":
    merchants = load_or_empty(cache.merchants_index, [])
    st.title("Comercios")

    c1, c2, c3 = st.columns([2, 1, 1])
    term = c1.text_input("Buscar por nombre, ID o categoria")
    enabled_label = c2.radio("Estado", ["Todos", "Activos", "Inactivos"], horizontal=True)
    states = sorted({m.get("state") for m in merchants if m.get("state")})
    state = c3.selectbox("Estado geografico", ["Todos"] + states)

    enabled = {"Todos": "ALL", "Activos": "ACTIVE", "Inactivos": "INACTIVE"}[enabled_label]
    found = filter_merchants(merchants, term, enabled, None if state == "Todos" else state)
    st.caption(f"{len(found):,} comercios")

    table = pd.DataFrame(found, columns=["id", "name", "category", "type", "enabled", "state"])
    st.dataframe(table, hide_index=True, use_container_width=True)

    if found:
        merchant_id = st.selectbox("Ver detalle", [m["id"] for m in found])
        try:
            detail = cache.merchant(merchant_id)
        except FileNotFoundError as e:
            st.error(str(e))
        else:
            st.subheader(detail.get("name") or f"Comercio {merchant_id}")
            d1, d2, d3 = st.columns(3)
            d1.metric("Categoria", detail.get("category") or "-")
            d2.metric("Tipo", detail.get("type") or "-")
            d3.metric("Tiendas", f"{len(detail.get('stores') or []):,}")
            located = next((m for m in found if m["id"] == merchant_id), {}).get("locations") or []
            if located:
                st.map(pd.DataFrame(located).rename(columns={"lng": "lon"}))
                st.dataframe(pd.DataFrame(located), hide_index=True, use_container_width=True)
            else:
                st.info("Este comercio no tiene tiendas con coordenadas.")


# ==================== PAGE: TIENDAS ====================
elif page == "Tiendas":
    stores = load_or_empty(cache.stores_index, [])
    st.title("Tiendas")

    c1, c2 = st.columns([2, 1])
    term = c1.text_input("Buscar por ID de tienda")
    type_ = c2.selectbox("Tipo de metodo", available_types(stores))

    found = filter_stores(stores, term, type_)
    st.caption(f"{len(found):,} tiendas")
    table = pd.DataFrame(found, columns=["id", "methodCount", "types"])
    if not table.empty:
        table["types"] = table["types"].apply(lambda t: ", ".join(t or []))
    st.dataframe(table, hide_index=True, use_container_width=True)

    with_id = [s["id"] for s in found if s.get("id") is not None]
    if with_id:
        store_id = st.selectbox("Ver metodos de pago", with_id)
        try:
            methods = cache.store(store_id)
        except FileNotFoundError as e:
            st.error(str(e))
        else:
            rows = [{
                "name": m.get("name"),
                "type": m.get("type") or "OTRO",
                "bankName": m.get("bankName"),
                "currency": (m.get("currency") or {}).get("name"),
                "accountType": m.get("accountType"),
            } for m in methods]
            st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)


# ==================== PAGE: ORDENES ====================
elif page == "Ordenes":
    orders = load_or_empty(cache.orders_index, [])
    st.title("Ordenes")

    c1, c2 = st.columns([2, 1])
    term = c1.text_input("Buscar por ID, cedula o cliente")
    status = c2.selectbox("Estado", available_statuses(orders))

    found = filter_orders(orders, term, status)
    st.caption(f"Mostrando {len(found):,} {'(limite)' if len(found) == 100 else ''} resultados")
    table = pd.DataFrame(found, columns=["id", "identifierNumber", "customerName", "amount",
                                         "status", "channel", "createdAt"])
    if not table.empty:
        table["customerName"] = table["customerName"].apply(censor_name)
        table["identifierNumber"] = table["identifierNumber"].apply(lambda v: censor_id_document(str(v)))
    st.dataframe(table, hide_index=True, use_container_width=True)

    if found:
        picked = st.selectbox("Ver detalle de la orden", [o["id"] for o in found])
        order = next(o for o in found if o["id"] == picked)
        try:
            detail = cache.client(order["identifierNumber"])
        except FileNotFoundError as e:
            st.error(str(e))
        else:
            d1, d2, d3 = st.columns(3)
            d1.metric("Monto", money(detail.get("amount") or 0))
            d2.metric("Estado", detail.get("statusName") or detail.get("status") or "-")
            d3.metric("Tienda", (detail.get("store") or {}).get("name") or "-")
            installments = ((detail.get("paymentDetails") or {}).get("installments")) or []
            if installments:
                st.markdown("**Cuotas**")
                inst_df = pd.DataFrame(installments).sort_values("installmentNumber")
                st.dataframe(inst_df, hide_index=True, use_container_width=True)


# ==================== PAGE: USUARIOS ====================
elif page == "Usuarios":
    orders = load_or_empty(cache.orders_index, [])
    st.title("Usuarios")

    term = st.text_input("Buscar por nombre o cedula")
    users = search_clients(client_summaries(orders), term)
    total_pages = max((len(users) + USERS_PER_PAGE - 1) // USERS_PER_PAGE, 1)
    current = st.number_input("Pagina", min_value=1, max_value=total_pages, value=1, step=1)
    start = (int(current) - 1) * USERS_PER_PAGE
    paginated = users[start:start + USERS_PER_PAGE]

    table = pd.DataFrame(paginated, columns=["identifierNumber", "name", "ordersCount", "volume"])
    if not table.empty:
        table["name"] = table["name"].apply(censor_name)
        table["identifierNumber"] = table["identifierNumber"].apply(lambda v: censor_id_document(str(v)))
    st.caption(f"{len(users):,} usuarios | pagina {int(current)} de {total_pages}")
    st.dataframe(table, hide_index=True, use_container_width=True)

    if paginated:
        ident = st.selectbox("Ver perfil", [u["identifierNumber"] for u in paginated],
                             format_func=lambda v: censor_id_document(str(v)))
        profile = client_profile(orders, ident)
        if profile:
            st.subheader(censor_name(profile["name"]))
            p1, p2, p3 = st.columns(3)
            p1.metric("Volumen Aprobado", money(profile["total_volume"]))
            p2.metric("Ordenes Aprobadas", f"{profile['approved']:,}")
            p3.metric("Ordenes Canceladas", f"{profile['cancelled']:,}")
            history = pd.DataFrame(profile["orders"], columns=["id", "amount", "status", "channel", "createdAt"])
            st.dataframe(history, hide_index=True, use_container_width=True)


# ==================== PAGE: ANALITICA ====================
elif page == "Analitica":
    merchants = load_or_empty(cache.merchants_index, [])
    orders = load_or_empty(cache.orders_index, [])
    payments = load_or_empty(cache.payments_analytics, {})

    st.title("Analiticas Avanzadas")

    tab_payments, tab_orders, tab_clients = st.tabs(["Pagos", "Ordenes", "Clientes"])

    with tab_payments:
        col_bank, col_cur = st.columns(2)
        with col_bank:
            st.subheader("Top 10 Bancos")
            banks_df = pd.DataFrame(payments.get("banks", []))
            if not banks_df.empty:
                fig_bank = px.bar(banks_df, x="count", y="name", orientation="h",
                                  color_discrete_sequence=["#6366f1"])
                fig_bank.update_layout(yaxis=dict(autorange="reversed"), height=420, xaxis_title="Metodos")
                st.plotly_chart(fig_bank, key="bank_chart")
        with col_cur:
            st.subheader("Monedas")
            cur_df = pd.DataFrame(payments.get("currencies", []))
            if not cur_df.empty:
                fig_cur = px.pie(cur_df, values="count", names="name", hole=0.45,
                                 color_discrete_sequence=COLORS)
                fig_cur.update_layout(height=420)
                st.plotly_chart(fig_cur, key="currency_chart")

        col_types, col_states = st.columns(2)
        with col_types:
            st.subheader("Metodos de Pago")
            types_df = pd.DataFrame(payments.get("paymentTypes", []))
            if not types_df.empty:
                fig_types = px.bar(types_df.head(15), x="name", y="count", color_discrete_sequence=["#10b981"])
                fig_types.update_layout(height=400, xaxis_title="")
                st.plotly_chart(fig_types, key="types_chart")
        with col_states:
            st.subheader("Comercios por Estado")
            states_df = pd.DataFrame(merchant_state_counts(merchants))
            if not states_df.empty:
                fig_states = px.bar(states_df, x="value", y="name", orientation="h",
                                    color_discrete_sequence=["#f59e0b"])
                fig_states.update_layout(yaxis=dict(autorange="reversed"), height=400, xaxis_title="Comercios")
                st.plotly_chart(fig_states, key="states_chart")

    with tab_orders:
        st.subheader("Ticket Promedio y Volumen Mensual")
        aov_df = pd.DataFrame(aov_over_time(orders))
        if not aov_df.empty:
            fig_aov = go.Figure()
            fig_aov.add_trace(go.Bar(
                x=aov_df["month"], y=aov_df["volume"], name="Volumen",
                marker_color="rgba(99,102,241,0.5)",
            ))
            fig_aov.add_trace(go.Scatter(
                x=aov_df["month"], y=aov_df["aov"], name="Ticket Promedio",
                yaxis="y2", line_color="#10b981",
            ))
            fig_aov.update_layout(
                yaxis=dict(title="Volumen ($)"),
                yaxis2=dict(title="Ticket ($)", overlaying="y", side="right"),
                hovermode="x unified", height=420, legend=dict(orientation="h", y=1.1),
            )
            st.plotly_chart(fig_aov, key="aov_chart")

        col_ticket, col_hour = st.columns(2)
        with col_ticket:
            st.subheader("Distribucion de Ticket")
            ticket_df = pd.DataFrame(ticket_size_distribution(orders))
            fig_ticket = px.bar(ticket_df, x="range", y="count", color_discrete_sequence=["#8b5cf6"])
            fig_ticket.update_layout(height=380, xaxis_title="", yaxis_title="Ordenes")
            st.plotly_chart(fig_ticket, key="ticket_chart")
        with col_hour:
            st.subheader("Actividad por Hora (UTC)")
            hour_df = pd.DataFrame(hourly_activity(orders))
            fig_hour = px.bar(hour_df, x="hour", y="count", color_discrete_sequence=["#0ea5e9"])
            fig_hour.update_layout(height=380, xaxis_title="", yaxis_title="Ordenes")
            st.plotly_chart(fig_hour, key="hour_chart")

        col_risk, col_chan = st.columns(2)
        with col_risk:
            st.subheader("Aprobado vs Cancelado")
            risk_df = pd.DataFrame(risk_over_time(orders))
            if not risk_df.empty:
                fig_risk = go.Figure()
                fig_risk.add_trace(go.Bar(x=risk_df["month"], y=risk_df["approved"],
                                          name="Aprobado", marker_color="#10b981"))
                fig_risk.add_trace(go.Bar(x=risk_df["month"], y=risk_df["cancelled"],
                                          name="Cancelado", marker_color="#ef4444"))
                fig_risk.update_layout(barmode="stack", height=380, hovermode="x unified")
                st.plotly_chart(fig_risk, key="risk_chart")
        with col_chan:
            st.subheader("Top Canales por Actividad")
            chan_df = pd.DataFrame(top_channels(orders))
            if not chan_df.empty:
                fig_chan = px.bar(chan_df, x="name", y="count", color_discrete_sequence=["#ec4899"])
                fig_chan.update_layout(height=380, xaxis_title="", yaxis_title="Ordenes")
                st.plotly_chart(fig_chan, key="top_channels_chart")

    with tab_clients:
        col_top, col_freq = st.columns(2)
        with col_top:
            st.subheader("Top 10 Clientes")
            top_df = pd.DataFrame(client_summaries(orders, include_cancelled_clients=False)[:10])
            if not top_df.empty:
                top_df["name"] = top_df["name"].apply(censor_name)
                top_df["identifierNumber"] = top_df["identifierNumber"].apply(
                    lambda v: censor_id_document(str(v)))
                st.dataframe(top_df, hide_index=True, use_container_width=True)
        with col_freq:
            st.subheader("Frecuencia de Compra")
            freq_df = pd.DataFrame(purchase_frequency(orders))
            fig_freq = px.pie(freq_df, values="value", names="name", hole=0.45,
                              color_discrete_sequence=COLORS)
            fig_freq.update_layout(height=380)
            st.plotly_chart(fig_freq, key="freq_chart")


# ==================== FOOTER ====================
st.divider()
st.caption("CASHEA Data Explorer | Indices generados con build_indexes.py y build_payments_analytics.py")
