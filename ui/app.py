import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
import json
import pandas as pd
import requests
import streamlit as st

from ui.api_client import ApiClient
from ui.components.events_timeline import render_events_timeline
from ui.components.tower_map import render_tower_map

st.set_page_config(page_title="Simulation Curator", layout="wide")

# Prefer environment variable to avoid secrets.toml warnings in dev
client = ApiClient(os.environ.get("API_BASE", "http://localhost:8000"))
st.title("Simulation Curator – Mobile Topology Changes")

mode = st.radio("Source", ["Demo scenario", "Custom scenario JSON", "Synthetic quadrants"], horizontal=True)

col1, col2, col3 = st.columns(3)
with col1:
    batching = st.toggle("Batch reconnects", value=True)
with col2:
    interval_s = st.number_input("Batch interval (s)", min_value=1, value=20, step=5, disabled=not batching)
with col3:
    gap_ms = st.number_input("Batch gap (ms)", min_value=0, value=500, step=100, disabled=not batching)

payload_text = None
if mode == "Custom scenario JSON":
    example = {
        "blocks": [{
            "block_id": "B1", "route_id": "S41",
            "stops": [
                {"stop_id": "a", "name": "Start", "arrival_time": "08:00:00", "departure_time": "08:00:00", "lat": 52.52, "lon": 13.40},
                {"stop_id": "b", "name": "End", "arrival_time": "08:10:00", "departure_time": "08:10:00", "lat": 52.52, "lon": 13.43},
            ],
            "shape_points": [{"shape_id": "s1", "lat": 52.52, "lon": round(13.40 + 0.003 * i, 6), "sequence": i} for i in range(11)],
        }],
        "cells": [
            {"tower_id": 100, "network_id": 2, "lat": 52.52, "lon": 13.401, "range": 2000},
            {"tower_id": 200, "network_id": 2, "lat": 52.52, "lon": 13.428, "range": 2000},
        ],
        "params": {"start_time": "08:00:00", "end_time": "08:10:00"},
    }
    payload_text = st.text_area("Scenario JSON", json.dumps(example, indent=2), height=300)
elif mode == "Synthetic quadrants":
    q1, q2, q3 = st.columns(3)
    fog_nodes = q1.number_input("Fog nodes", min_value=1, value=10)
    per_node = q2.number_input("Devices per fog node", min_value=1, value=10)
    moving = q3.number_input("Moving devices", min_value=0, value=1)

run_btn = st.button("Run", type="primary")

if run_btn:
    interval_ms = int(interval_s) * 1000 if batching else None
    try:
        if mode == "Demo scenario":
            data = client.demo(batch_interval_ms=interval_ms, batch_gap_ms=int(gap_ms), include_geo=True)
        elif mode == "Custom scenario JSON":
            try:
                payload = json.loads(payload_text)
            except json.JSONDecodeError as e:
                st.error(f"Invalid JSON: {e}")
                st.stop()
            params = dict(payload.get("params", {}))
            params.update({"batch_interval_ms": interval_ms, "batch_gap_ms": int(gap_ms), "include_geo": True})
            data = client.simulate(payload.get("blocks", []), payload.get("cells", []), params)
        else:
            data = client.quadrants(int(fog_nodes), int(per_node), int(moving))
    except requests.HTTPError as e:
        st.error(f"API error: {e.response.status_code} {e.response.text}")
        st.stop()

    if data.get("summary"):
        st.subheader("Summary")
        st.json(data["summary"])

    updates = data.get("topology_updates", {}).get("topology_updates", [])
    if not updates:
        st.warning("No topology changes produced.")
    else:
        st.subheader("Reconnects over output time")
        st.plotly_chart(render_events_timeline(updates), use_container_width=True)

    if data.get("geo"):
        st.subheader("Towers and attachments")
        st.plotly_chart(render_tower_map(data["geo"]), use_container_width=True)

    st.subheader("Fixed topology")
    nodes = data.get("topology", {}).get("nodes", {})
    st.dataframe(pd.DataFrame([
        {"node": k, "lon": v[0], "lat": v[1]} for k, v in nodes.items()
    ]), use_container_width=True)

    if data.get("source_groups"):
        st.subheader("Source groups")
        st.json(data["source_groups"])

    st.download_button(
        "Download topology updates",
        json.dumps(data.get("topology_updates", {}), indent=2),
        file_name="topology_updates.json",
    )
