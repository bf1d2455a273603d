import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from simulation_curator.config import CuratorConfig
from simulation_curator.core.models import RadioCell

logger = logging.getLogger(__name__)

# OpenCelliD exports carry no header row
CELL_COLUMNS = [
    "radio", "mcc", "mnc", "tac", "cid", "unknown_col", "lon", "lat",
    "range", "samples", "changeable", "created", "updated", "average_signal",
]


def read_cell_data_csv(path: Union[str, Path]) -> pd.DataFrame:
    return pd.read_csv(
        path,
        header=None,
        names=CELL_COLUMNS,
        dtype={"radio": "string"},
    )


def filter_cell_data(
    df: pd.DataFrame,
    radio: str,
    mcc: int,
    mncs: Sequence[int],
    created_after: int,
    updated_after: int,
    min_samples: int,
) -> pd.DataFrame:
    mask = (
        (df["radio"] == radio)
        & (df["mcc"] == mcc)
        & (df["mnc"].isin(list(mncs)))
        & (df["created"] > created_after)
        & (df["updated"] > updated_after)
        & (df["samples"] > min_samples)
    )
    return df[mask]


def cells_from_frame(df: pd.DataFrame) -> List[RadioCell]:
    return [
        RadioCell(
            tower_id=int(row.cid),
            network_id=int(row.mnc),
            lat=float(row.lat),
            lon=float(row.lon),
            range=float(row.range),
        )
        for row in df.itertuples(index=False)
    ]


def load_candidate_cells(path: Union[str, Path], config: Optional[CuratorConfig] = None) -> List[RadioCell]:
    config = config or CuratorConfig()
    df = read_cell_data_csv(path)
    filtered = filter_cell_data(
        df,
        radio=config.radio,
        mcc=config.mcc,
        mncs=config.mncs,
        created_after=config.created_after,
        updated_after=config.updated_after,
        min_samples=config.min_samples,
    )
    logger.info("Cell data %s: %d of %d rows pass the filters", path, len(filtered), len(df))
    return cells_from_frame(filtered)
