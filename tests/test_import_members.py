"""Tests for the member CSV reader."""
import io
from datetime import date

from import_members import read_members


def test_reads_valid_rows_and_skips_bad_ones(capsys):
    csv_text = (
        "email,birthdate,status\n"
        " Ana@Sututeh.com ,1990-05-17,\n"
        "luis@sututeh.com,1985-01-02,Inactivo\n"
        "sin-correo,1980-01-01,Activo\n"
        "marta@sututeh.com,02/03/1970,Activo\n"
        "pedro@sututeh.com,1975-07-07,Jubilado\n"
    )
    rows = list(read_members(io.StringIO(csv_text)))

    assert rows == [
        ("ana@sututeh.com", date(1990, 5, 17), "Activo"),
        ("luis@sututeh.com", date(1985, 1, 2), "Inactivo"),
    ]
    out = capsys.readouterr().out
    assert "line 4: skipped" in out
    assert "line 5: skipped" in out
    assert "line 6: skipped" in out
