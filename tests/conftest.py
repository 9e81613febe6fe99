import sys
import os
import tempfile
import pytest
from unittest.mock import MagicMock

import requests

# Project root, needed for config, schemas, TravelIntent, database, main.
_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _root not in sys.path:
    sys.path.insert(0, _root)

# main.py creates its tables on import; keep that out of the working directory.
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite:///" + os.path.join(tempfile.mkdtemp(prefix="travel-agent-"), "import.db"),
)

from schemas import WeatherDay, PointOfInterest
from TravelIntent import TravelIntent


def http_response(status_code=200, payload=None):
    """A stand-in for requests.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
    else:
        resp.raise_for_status.return_value = None
    return resp


def llm_response(text):
    """A stand-in for a litellm ModelResponse carrying *text*."""
    resp = MagicMock()
    resp.choices[0].message.content = text
    return resp


def open_meteo_payload(days=7, codes=None):
    codes = codes or [0, 1, 2, 3, 61, 71, 95][:days]
    return {
        "daily": {
            "time": [f"2026-06-{d:02d}" for d in range(1, days + 1)],
            "temperature_2m_max": [20.4 + d for d in range(days)],
            "temperature_2m_min": [8.6 + d for d in range(days)],
            "weathercode": codes,
        }
    }


@pytest.fixture
def denver_intent():
    return TravelIntent(destination="Denver", duration_days=3, interests=("hiking",))


@pytest.fixture
def forecast():
    return [
        WeatherDay(date=f"2026-06-0{d}", temp_max_c=22 + d, temp_min_c=9 + d,
                   condition="Clear sky", raw_code=0)
        for d in range(1, 8)
    ]


@pytest.fixture
def hiking_pois():
    return [
        PointOfInterest(id=1, name="Mount Falcon Trail", category="hiking",
                        latitude=39.64, longitude=-105.23),
        PointOfInterest(id=2, name="Green Mountain", category="peak"),
    ]


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    """Point the conversation store at a fresh SQLite file."""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    import database
    database.init_db()
    return url
