"""
Export helpers for simulation histories.

The state records collected by every region are reshaped into pandas
DataFrames (one row per step) or into a single xarray DataArray spanning all
regions and variants, which can be written to netCDF.
"""

import logging
import os
from typing import TYPE_CHECKING, List, Optional

import numpy as np
import pandas as pd
import xarray as xr

from .statistics import STATE_FIELDS

if TYPE_CHECKING:
    from .simulator import Simulator

logger = logging.getLogger(__name__)

OBSERVABLE_DIMS = ("M", "V", "T", "epi_states")


def _variant_names(sim: "Simulator") -> List[str]:
    names: List[str] = []
    for region in sim.regions.values():
        for virus in region.variants:
            if virus.name not in names:
                names.append(virus.name)
    return names


def history_dataframe(sim: "Simulator") -> pd.DataFrame:
    """
    Long-format history of every (region, variant) pair.

    Returns:
        DataFrame with ``region`` and ``variant`` columns followed by the
        fields of ``RegionState``
    """
    frames = []
    for region in sim.regions.values():
        for virus in region.variants:
            frame = region.history_frame(virus).reset_index()
            frame.insert(0, "variant", virus.name)
            frame.insert(0, "region", region.name)
            frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=["region", "variant", "step", *STATE_FIELDS])
    return pd.concat(frames, ignore_index=True)


def compute_observables(sim: "Simulator", steps: Optional[int] = None) -> xr.DataArray:
    """
    Collect the state history of a simulation into a DataArray.

    Args:
        sim: Simulator whose regions hold the history
        steps: Number of steps along ``T``; defaults to the simulator's
            step count

    Returns:
        DataArray with dims ``(M, V, T, epi_states)``; entries are NaN for
        steps where a variant was not yet present in a region
    """
    steps = sim.step_count if steps is None else steps
    regions = list(sim.regions)
    variants = _variant_names(sim)
    data = np.full((len(regions), len(variants), steps, len(STATE_FIELDS)), np.nan)

    for m, region in enumerate(sim.regions.values()):
        for virus in region.variants:
            v = variants.index(virus.name)
            for state in region.history(virus):
                if state.step >= steps:
                    continue
                data[m, v, state.step, :] = [getattr(state, name) for name in STATE_FIELDS]

    coords = {
        "M": regions,
        "V": variants,
        "T": np.arange(steps),
        "epi_states": list(STATE_FIELDS),
    }
    observables = xr.DataArray(data, coords=coords, dims=list(OBSERVABLE_DIMS), name="observables")
    observables.attrs["steps"] = steps
    return observables


def save_observables(observables: xr.DataArray, path: str) -> str:
    """
    Write observables to a netCDF file, creating parent folders as needed.

    Returns:
        Absolute path of the written file
    """
    path = os.path.abspath(path)
    folder = os.path.dirname(path)
    if folder and not os.path.exists(folder):
        os.makedirs(folder)
    observables.to_netcdf(path, engine="netcdf4")
    logger.info("Observables written to %s", path)
    return path


def load_observables(path: str) -> xr.DataArray:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Observables file not found: {path}")
    with xr.open_dataarray(path, engine="netcdf4") as observables:
        return observables.load()
