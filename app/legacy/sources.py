"""Legacy source files and the staging column manifest.

Each legacy .DBF file maps to one all-text staging table. Column order here is
the order of the staging table and of every insert into it.
"""
from dataclasses import dataclass

# Number of product slots inlined in every VENDAS/PEDIDOS record
SLOT_COUNT = 7


@dataclass(frozen=True)
class StagingColumn:
    name: str  # staging column
    field: str  # DBF field name


@dataclass(frozen=True)
class LegacySource:
    file: str
    table: str
    columns: tuple[StagingColumn, ...]
    required: bool = False

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]


def _columns(*names: str) -> tuple[StagingColumn, ...]:
    return tuple(StagingColumn(name=n, field=n.upper()) for n in names)


def _sale_columns() -> tuple[StagingColumn, ...]:
    header = ("pedido", "emissao", "cod_vend", "cod_cli", "cod_fpg", "sub_total", "desconto", "total_gera")
    slots = tuple(
        f"{prefix}{index}"
        for prefix in ("cod", "qtde", "vlr", "total")
        for index in range(1, SLOT_COUNT + 1)
    )
    return _columns(*header, *slots)


GRUPO = LegacySource("GRUPO.DBF", "stg_grupo", _columns("cod_grup", "nome"), required=True)
PRODUTO = LegacySource(
    "PRODUTO.DBF",
    "stg_produto",
    _columns("cod_prod", "nome_prod", "cod_barra", "referencia", "cod_grup", "esto_min", "avista", "preco_base"),
    required=True,
)
CLIENTES = LegacySource(
    "CLIENTES.DBF",
    "stg_clientes",
    _columns("codigo", "nome", "cpf", "endereco", "cidade", "uf", "cep", "fone", "status", "obs"),
    required=True,
)
VENDEDOR = LegacySource("VENDEDOR.DBF", "stg_vendedor", _columns("codigo", "nome"), required=True)
FORMA_PG = LegacySource("FORMA_PG.DBF", "stg_forma_pg", _columns("cod_fpg", "forma"))
VENDAS = LegacySource("VENDAS.DBF", "stg_vendas", _sale_columns(), required=True)
PEDIDOS = LegacySource("PEDIDOS.DBF", "stg_pedidos", _sale_columns())
PAGAMENT = LegacySource(
    "PAGAMENT.DBF",
    "stg_pagament",
    _columns("cod_cli", "valor_doc", "vlr_pago", "restante", "pagamento"),
)
MOV_EST = LegacySource(
    "MOV_EST.DBF",
    "stg_mov_est",
    _columns("tip_mov", "data", "cod_prod", "qtde", "valor", "total", "nf"),
)

# Load order: reference data before the transactional files that point at it
LEGACY_SOURCES: tuple[LegacySource, ...] = (
    GRUPO,
    PRODUTO,
    CLIENTES,
    VENDEDOR,
    FORMA_PG,
    VENDAS,
    PEDIDOS,
    PAGAMENT,
    MOV_EST,
)

REQUIRED_FILES: list[str] = [s.file for s in LEGACY_SOURCES if s.required]

# Extensions accepted from an upload (.DBT holds memo fields)
ALLOWED_UPLOAD_EXTENSIONS = {".dbf", ".dbt", ".zip"}
