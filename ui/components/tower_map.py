import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from typing import Any, Dict
import plotly.graph_objects as go


def _label(props: Dict[str, Any]) -> str:
    if "network_id" in props:
        return f"Tower {props.get('id')} / {props.get('network_id')} (range {props.get('range')}m)"
    if "stop_name" in props:
        return f"{props['stop_name']} {props.get('arrival_time', '')}"
    if "block_id" in props:
        return f"Block {props['block_id']} ({props.get('route_id', '')})"
    return f"{props.get('shape_id', '')} #{props.get('shape_pt_sequence', '')} {props.get('time', '')}"


def render_tower_map(geo: Dict[str, Any]) -> go.Figure:
    fig = go.Figure()
    for feature in geo.get("features", []):
        geometry = feature.get("geometry", {})
        props = feature.get("properties", {})
        color = props.get("marker-color") or props.get("stroke") or "#888888"
        if geometry.get("type") == "LineString":
            lons = [c[0] for c in geometry["coordinates"]]
            lats = [c[1] for c in geometry["coordinates"]]
            fig.add_trace(go.Scattermap(
                lon=lons, lat=lats, mode="lines",
                line=dict(color=color, width=props.get("stroke-width", 4)),
                hovertext=_label(props), showlegend=False,
            ))
        elif geometry.get("type") == "Point":
            lon, lat = geometry["coordinates"]
            fig.add_trace(go.Scattermap(
                lon=[lon], lat=[lat], mode="markers",
                marker=dict(color=color, size=14 if "network_id" in props else 6),
                hovertext=_label(props), showlegend=False,
            ))
    fig.update_layout(
        map=dict(style="open-street-map", zoom=12),
        height=550,
        margin=dict(l=10, r=10, t=10, b=10),
    )
    return fig
