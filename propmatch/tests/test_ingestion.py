import importlib
import json
from pathlib import Path
from unittest.mock import patch

import pandas as pd

from propmatch.data_ingestion.config import IngestionConfig
from propmatch.data_ingestion.ingest import CANONICAL_COLUMNS, normalize_listings, run_ingestion
from propmatch.recommendations.data_store import frame_to_listings, load_listings

RAW_ROWS = [
    {"id": 1, "titulo": "Casa en Funes", "ciudad": "Rosario", "tipo": "Casa",
     "precio": 310000, "ambientes": 4, "metros_cuadrados": 230, "imagen": "/img/1.jpg"},
    {"id": 2, "titulo": "Loft", "ciudad": "Cordoba", "tipo": "Loft",
     "precio": 120000, "ambientes": 1, "metros_cuadrados": 55, "imagen": ""},
    {"id": 3, "titulo": "Sin precio", "ciudad": "Cordoba", "tipo": "Casa",
     "precio": None, "ambientes": 2, "metros_cuadrados": 80},
    {"id": 4, "titulo": "Precio negativo", "ciudad": "Mendoza", "tipo": "Casa",
     "precio": -5, "ambientes": 2, "metros_cuadrados": 80},
    {"id": 5, "titulo": "Ambientes raros", "ciudad": "Mendoza", "tipo": "Casa",
     "precio": 90000, "ambientes": 2.5, "metros_cuadrados": 80},
]


def _write_raw(tmp_path: Path, rows: list[dict]) -> Path:
    path = tmp_path / "properties.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


def test_normalize_maps_spanish_columns_and_drops_bad_rows():
    df = normalize_listings(pd.DataFrame(RAW_ROWS))

    assert list(df.columns) == CANONICAL_COLUMNS
    assert df["id"].tolist() == ["1", "2"]
    assert df.loc[0, "city"] == "Rosario"
    assert df.loc[0, "square_meters"] == 230
    assert df.loc[0, "bedrooms"] == 4
    assert df.loc[1, "image"] == "/placeholder.svg"


def test_normalize_accepts_english_columns():
    raw = pd.DataFrame([
        {"id": "a", "title": "Flat", "city": "X", "type": "Apt", "price": 10.0,
         "squareMeters": 20.0, "bedrooms": 1},
    ])
    listings = frame_to_listings(normalize_listings(raw))
    assert listings[0].id == "a"
    assert listings[0].square_meters == 20.0
    assert listings[0].image == "/placeholder.svg"


def test_normalize_drops_duplicate_ids():
    df = normalize_listings(pd.DataFrame([RAW_ROWS[0], RAW_ROWS[0]]))
    assert len(df) == 1


def test_run_ingestion_creates_processed_file(tmp_path: Path):
    cfg = IngestionConfig(
        raw_data_path=_write_raw(tmp_path, RAW_ROWS),
        processed_data_dir=tmp_path / "processed",
    )

    output_path = run_ingestion(config=cfg)

    assert output_path.is_file(), "Processed CSV should be created"
    df = pd.read_csv(output_path)
    assert list(df.columns) == CANONICAL_COLUMNS
    assert len(df) == 2


def test_load_listings_prefers_processed_csv(tmp_path: Path):
    cfg = IngestionConfig(
        raw_data_path=_write_raw(tmp_path, RAW_ROWS),
        processed_data_dir=tmp_path / "processed",
    )
    run_ingestion(config=cfg)
    # Changing the raw file after ingestion must not affect the load.
    _write_raw(tmp_path, RAW_ROWS[:1])

    try:
        listings = load_listings(cfg)
        assert [l.id for l in listings] == ["1", "2"]
        assert listings[1].bedrooms == 1
    finally:
        load_listings()


def test_load_listings_from_raw_when_not_processed(tmp_path: Path):
    cfg = IngestionConfig(
        raw_data_path=_write_raw(tmp_path, RAW_ROWS),
        processed_data_dir=tmp_path / "missing",
    )
    try:
        listings = load_listings(cfg)
        assert [l.id for l in listings] == ["1", "2"]
    finally:
        load_listings()


def test_load_listings_keeps_numeric_looking_text_as_strings(tmp_path: Path):
    rows = [
        {"id": 7, "titulo": "2024", "ciudad": "100", "tipo": "3",
         "precio": 150000, "ambientes": 2, "metros_cuadrados": 70},
    ]
    cfg = IngestionConfig(
        raw_data_path=_write_raw(tmp_path, rows),
        processed_data_dir=tmp_path / "processed",
    )
    run_ingestion(config=cfg)
    try:
        listing = load_listings(cfg)[0]
        assert (listing.title, listing.city, listing.type) == ("2024", "100", "3")
    finally:
        load_listings()


def test_ingestion_config_loads_dotenv(monkeypatch, tmp_path: Path):
    from propmatch.data_ingestion import config as ingestion_config

    with patch("dotenv.load_dotenv") as mock_load:
        importlib.reload(ingestion_config)
    try:
        loaded_path = mock_load.call_args.args[0]
        assert loaded_path.name == ".env"
        assert loaded_path.parent == Path(ingestion_config.__file__).resolve().parent.parent.parent
    finally:
        importlib.reload(ingestion_config)

    monkeypatch.setenv("PROPMATCH_RAW_DATA", str(tmp_path / "custom.json"))
    assert ingestion_config.IngestionConfig().raw_data_path == tmp_path / "custom.json"
