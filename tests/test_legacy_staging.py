"""Tests for the staging loader (app/legacy/staging.py)."""
import pytest

from app.legacy import sources
from app.legacy.exceptions import DecodeError
from app.legacy.files import prepare_legacy_files
from app.legacy.staging import count_staging, load_source, load_staging, staging_rows
from tests.dbf_fixtures import C, write_dbf, write_sample_export


def _collect():
    entries = []

    def log(level, message):
        entries.append((level, message))

    return entries, log


@pytest.mark.integration
class TestLoadStaging:
    def test_loads_every_supplied_file(self, db, legacy_dir):
        entries, log = _collect()
        summary = load_staging(db, prepare_legacy_files(legacy_dir), log=log)

        assert summary["stg_grupo"] == 3
        assert summary["stg_produto"] == 10
        assert summary["stg_clientes"] == 2
        assert summary["stg_vendedor"] == 1
        assert summary["stg_vendas"] == 1
        assert summary["stg_pedidos"] == 0
        assert ("info", "Loading GRUPO.DBF into staging table stg_grupo") in entries
        assert ("warn", "Optional file PEDIDOS.DBF not provided; skipping.") in entries

    def test_values_are_staged_as_text(self, db, legacy_dir):
        load_staging(db, prepare_legacy_files(legacy_dir))

        groups = staging_rows(db, sources.GRUPO)
        assert {"cod_grup": "01", "nome": "Bebidas"} in groups

        (sale,) = staging_rows(db, sources.VENDAS)
        assert sale["pedido"] == "1001"
        assert sale["emissao"] == "2023-05-10"
        assert sale["cod1"] == "P001"
        assert sale["qtde1"] == "2.0"
        assert sale["cod2"] == ""
        assert sale["qtde2"] is None

    def test_staging_is_reset_each_run(self, db, legacy_dir):
        files = prepare_legacy_files(legacy_dir)
        load_staging(db, files)
        load_staging(db, files)
        assert count_staging(db, sources.PRODUTO) == 10

    def test_small_batches(self, db, legacy_dir):
        summary = load_staging(db, prepare_legacy_files(legacy_dir), batch_size=3)
        assert summary["stg_produto"] == 10
        assert count_staging(db, sources.PRODUTO) == 10

    def test_decode_error_propagates(self, db, tmp_path):
        write_sample_export(tmp_path)
        (tmp_path / "PRODUTO.DBF").write_bytes(b"garbage")
        with pytest.raises(DecodeError):
            load_staging(db, prepare_legacy_files(tmp_path))


@pytest.mark.integration
class TestLoadSource:
    def test_absent_field_is_staged_empty_with_warning(self, db, tmp_path):
        path = write_dbf(tmp_path / "GRUPO.DBF", [C("COD_GRUP", 5)], [{"COD_GRUP": "07"}])
        load_staging(db, {}, sources=(sources.GRUPO,))
        entries, log = _collect()

        count = load_source(db, sources.GRUPO, {"GRUPO.DBF": path}, log=log)

        assert count == 1
        assert staging_rows(db, sources.GRUPO) == [{"cod_grup": "07", "nome": None}]
        assert any(level == "warn" and "NOME" in message for level, message in entries)

    def test_field_names_match_case_insensitively(self, db, tmp_path):
        path = write_dbf(
            tmp_path / "VENDEDOR.DBF", [C("codigo", 4), C("nome", 20)], [{"codigo": "V9", "nome": "Ana"}],
        )
        load_staging(db, {}, sources=(sources.VENDEDOR,))
        load_source(db, sources.VENDEDOR, {"VENDEDOR.DBF": path})
        assert staging_rows(db, sources.VENDEDOR) == [{"codigo": "V9", "nome": "Ana"}]
