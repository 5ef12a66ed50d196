import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from seihrd.parameters import BELGIUM_SPRING_2020, CompartmentState, RateParameters


@pytest.fixture
def belgium_state():
    return BELGIUM_SPRING_2020.initial_state()


@pytest.fixture
def belgium_params():
    return BELGIUM_SPRING_2020.params


@pytest.fixture
def small_state():
    return CompartmentState(S=990_000, E=5_000, I=5_000)


@pytest.fixture
def fast_params():
    return RateParameters(beta=0.6, epsilon=0.3, sigma=0.05, mu=0.15, tau=0.1, theta=0.02)


@pytest.fixture
def hosp_csv(tmp_path):
    """Sciensano-style file: two regions, three provinces, 2020-03-13 .. 2020-03-22"""
    dates = pd.date_range("2020-03-13", "2020-03-22", freq="D")
    rows = []
    for k, d in enumerate(dates):
        for province, region, new_in in (
            ("Antwerpen", "Flanders", 10 + k),
            ("Limburg", "Flanders", 5 + k),
            ("Liège", "Wallonia", 3 * k),
        ):
            rows.append({
                "DATE": d.strftime("%Y-%m-%d"),
                "PROVINCE": province,
                "REGION": region,
                "NR_REPORTING": 10,
                "TOTAL_IN": 100 + new_in,
                "TOTAL_IN_ICU": 10,
                "TOTAL_IN_RESP": 5,
                "TOTAL_IN_ECMO": 0,
                "NEW_IN": new_in,
                "NEW_OUT": 2,
            })
    path = tmp_path / "COVID19BE_HOSP.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


@pytest.fixture
def climate_csv(tmp_path):
    rng = np.random.default_rng(0)
    dates = pd.date_range("2020-03-01", "2020-03-31", freq="D")
    df = pd.DataFrame({
        "date": dates.strftime("%Y-%m-%d"),
        "temperature": 8 + 0.2 * np.arange(len(dates)) + rng.normal(0, 1, len(dates)),
        "humidity": 80 - 0.3 * np.arange(len(dates)) + rng.normal(0, 2, len(dates)),
        "station": "Uccle",
    })
    path = tmp_path / "climate.csv"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def mobility_csv(tmp_path):
    dates = pd.date_range("2020-03-01", "2020-03-31", freq="D")
    rows = []
    for k, d in enumerate(dates):
        base = {
            "country_region_code": "BE",
            "country_region": "Belgium",
            "date": d.strftime("%Y-%m-%d"),
            "retail_and_recreation_percent_change_from_baseline": -2.0 * k,
            "grocery_and_pharmacy_percent_change_from_baseline": -1.0 * k + 5,
            "parks_percent_change_from_baseline": (k % 7) * 3.0,
            "transit_stations_percent_change_from_baseline": -2.5 * k,
            "workplaces_percent_change_from_baseline": -1.5 * k - (k % 7 in (5, 6)) * 20,
            "residential_percent_change_from_baseline": 0.8 * k,
        }
        rows.append({**base, "sub_region_1": None, "sub_region_2": None})
        rows.append({**base, "sub_region_1": "Brussels", "sub_region_2": None,
                     "residential_percent_change_from_baseline": 99.0})
        rows.append({**base, "country_region_code": "NL", "country_region": "Netherlands",
                     "sub_region_1": None, "sub_region_2": None,
                     "residential_percent_change_from_baseline": -99.0})
    path = tmp_path / "mobility.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path
