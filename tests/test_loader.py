"""Unit tests for reading article files"""

import json

import pandas as pd
import pytest

from entity_resolution.importing.loader import get_table_stats, load_table


@pytest.mark.unit
def test_semicolon_csv(tmp_path):
    path = tmp_path / "artikel.csv"
    path.write_text(
        "Artikelname;Lieferant;Gebindepreis\n"
        "Tomaten passiert;Metro AG;12,90\n"
        ";;\n"
        "Butter;Metro AG;1,89\n",
        encoding="utf-8",
    )

    headers, rows = load_table(path)

    assert headers == ["Artikelname", "Lieferant", "Gebindepreis"]
    assert len(rows) == 3
    assert rows[0] == {"Artikelname": "Tomaten passiert", "Lieferant": "Metro AG", "Gebindepreis": "12,90"}
    assert rows[1] == {"Artikelname": "", "Lieferant": "", "Gebindepreis": ""}
    assert get_table_stats(headers, rows) == {"columns": 3, "total_rows": 3, "empty_rows": 1}


@pytest.mark.unit
def test_windows_encoded_csv(tmp_path):
    path = tmp_path / "artikel.csv"
    path.write_bytes("Bezeichnung;Preis\nKäse;3,50\n".encode("cp1252"))

    headers, rows = load_table(str(path))

    assert headers == ["Bezeichnung", "Preis"]
    assert rows == [{"Bezeichnung": "Käse", "Preis": "3,50"}]


@pytest.mark.unit
def test_excel(tmp_path):
    path = tmp_path / "artikel.xlsx"
    pd.DataFrame(
        {"Artikelname": ["Butter", "Sahne"], "Gebindepreis": [1.89, None]}
    ).to_excel(path, index=False, engine="openpyxl")

    headers, rows = load_table(path)

    assert headers == ["Artikelname", "Gebindepreis"]
    assert rows[0] == {"Artikelname": "Butter", "Gebindepreis": 1.89}
    assert rows[1]["Gebindepreis"] == ""


@pytest.mark.unit
def test_json_records(tmp_path):
    path = tmp_path / "artikel.json"
    path.write_text(
        json.dumps([{"Artikelname": "Butter", "Gebindepreis": 1.89, "Kategorie": None}]),
        encoding="utf-8",
    )

    headers, rows = load_table(path)

    assert headers == ["Artikelname", "Gebindepreis", "Kategorie"]
    assert rows == [{"Artikelname": "Butter", "Gebindepreis": 1.89, "Kategorie": ""}]


@pytest.mark.unit
def test_numbers_keep_their_type(tmp_path):
    json_path = tmp_path / "artikel.json"
    json_path.write_text(
        json.dumps([{"Artikelname": "Safran", "Gebindepreis": 2.125, "Inhalt": 0.5}]),
        encoding="utf-8",
    )
    excel_path = tmp_path / "artikel.xlsx"
    pd.DataFrame(
        {"Artikelnummer": [12345, None], "Gebindepreis": [2.125, 4.0]}
    ).to_excel(excel_path, index=False, engine="openpyxl")

    _, json_rows = load_table(json_path)
    _, excel_rows = load_table(excel_path)

    assert json_rows == [{"Artikelname": "Safran", "Gebindepreis": 2.125, "Inhalt": 0.5}]
    assert excel_rows[0] == {"Artikelnummer": 12345, "Gebindepreis": 2.125}
    assert excel_rows[1] == {"Artikelnummer": "", "Gebindepreis": 4}


@pytest.mark.unit
def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_table(tmp_path / "missing.csv")


@pytest.mark.unit
def test_unsupported_file_type(tmp_path):
    path = tmp_path / "artikel.pdf"
    path.write_bytes(b"%PDF-1.4")

    with pytest.raises(ValueError):
        load_table(path)
