import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from typing import Any, Dict, List
import pandas as pd
import plotly.express as px


def events_frame(updates: List[Dict[str, Any]]) -> pd.DataFrame:
    rows = []
    for u in updates:
        for ev in u.get("events", []):
            rows.append({
                "timestamp_ms": u.get("timestamp_ms"),
                "child": str(ev.get("childId")),
                "parent": str(ev.get("parentId")),
                "action": ev.get("action"),
            })
    return pd.DataFrame(rows, columns=["timestamp_ms", "child", "parent", "action"])


def render_events_timeline(updates: List[Dict[str, Any]]):
    df = events_frame(updates)
    # Only adds are plotted; each add marks the vehicle's new parent
    adds = df[df["action"] == "add"]
    fig = px.scatter(
        adds,
        x="timestamp_ms",
        y="child",
        color="parent",
        custom_data=["parent"],
    )
    fig.update_traces(marker=dict(size=10), hovertemplate="Vehicle=%{y}<br>Output time=%{x}ms<br>New parent=%{customdata[0]}")
    fig.update_layout(xaxis_title="Output timestamp (ms)", yaxis_title="Mobile node", height=400)
    return fig
