import re

from simulation_curator.config import CuratorConfig
from simulation_curator.core.pipeline import run_pipeline
from simulation_curator.sim.geo_document import TOWER_COLOR, build_geo_document, color_palette
from simulation_curator.sim.scenario import demo_scenario


def test_color_palette():
    colors = color_palette(4)
    assert len(colors) == 4
    assert len(set(colors)) == 4
    assert all(re.fullmatch(r"#[0-9A-F]{6}", c) for c in colors)
    assert color_palette(0) == []


def test_geo_document_features():
    blocks, cells, start, end = demo_scenario()
    result = run_pipeline(blocks, cells, start, end, CuratorConfig().replace(batch_interval_ms=0))
    doc = build_geo_document(result.blocks, result.resolution)
    assert doc["type"] == "FeatureCollection"
    features = doc["features"]

    towers = [f for f in features if "network_id" in f["properties"]]
    assert sorted(f["properties"]["id"] for f in towers) == [100, 200]
    assert all(f["properties"]["marker-color"] == TOWER_COLOR for f in towers)

    lines = [f for f in features if "block_id" in f["properties"]]
    assert [f["properties"]["block_id"] for f in lines] == ["B1", "B2"]
    assert len(lines[0]["geometry"]["coordinates"]) == 11

    attachment_lines = [f for f in features if f["properties"].get("stroke") == TOWER_COLOR]
    assert len(attachment_lines) == 22

    stops = [f for f in features if "stop_id" in f["properties"]]
    assert stops[0]["properties"]["arrival_time"] == "08:00:00"
