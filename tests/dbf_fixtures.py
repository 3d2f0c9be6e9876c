"""Write small dBase III (.DBF) files for tests, plus a sample legacy export.

Only the C (character), N (numeric) and D (date) field types are produced,
which is all the legacy export uses.
"""
import struct
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional

# (name, type, length, decimals)
Field = tuple[str, str, int, int]


def C(name: str, length: int = 30) -> Field:
    return (name, "C", length, 0)


def N(name: str, length: int = 12, decimals: int = 2) -> Field:
    return (name, "N", length, decimals)


def D(name: str) -> Field:
    return (name, "D", 8, 0)


def _encode(field: Field, value: Any, encoding: str) -> bytes:
    _, ftype, length, decimals = field
    if value is None:
        return b" " * length
    if ftype == "C":
        return str(value).encode(encoding)[:length].ljust(length, b" ")
    if ftype == "N":
        if isinstance(value, str):
            text = value
        elif decimals:
            text = f"{value:.{decimals}f}"
        else:
            text = str(int(value))
        return text.encode("ascii")[:length].rjust(length, b" ")
    if ftype == "D":
        text = value.strftime("%Y%m%d") if isinstance(value, date) else str(value)
        return text.encode("ascii")[:8].ljust(8, b" ")
    raise ValueError(f"unsupported field type {ftype}")


def write_dbf(
    path: Path,
    fields: list[Field],
    records: Iterable[dict[str, Any]],
    encoding: str = "latin1",
    deleted: Iterable[int] = (),
) -> Path:
    """Write a dBase III table. Indexes listed in `deleted` get the deletion flag."""
    records = list(records)
    deleted = set(deleted)
    header_len = 32 + 32 * len(fields) + 1
    record_len = 1 + sum(f[2] for f in fields)
    stamp = date(2024, 1, 31)

    out = bytearray(struct.pack(
        "<BBBBLHH20x",
        0x03, stamp.year - 1900, stamp.month, stamp.day,
        len(records), header_len, record_len,
    ))
    for name, ftype, length, decimals in fields:
        out += struct.pack("<11sc4xBB14x", name.encode("ascii"), ftype.encode("ascii"), length, decimals)
    out += b"\r"
    for index, record in enumerate(records):
        out += b"*" if index in deleted else b" "
        for field in fields:
            out += _encode(field, record.get(field[0]), encoding)
    out += b"\x1a"

    path = Path(path)
    path.write_bytes(bytes(out))
    return path


# ── Legacy table layouts ─────────────────────────────────────────────

GRUPO_FIELDS = [C("COD_GRUP", 5), C("NOME", 30)]
PRODUTO_FIELDS = [
    C("COD_PROD", 10), C("NOME_PROD", 40), C("COD_BARRA", 14), C("REFERENCIA", 20),
    C("COD_GRUP", 5), N("ESTO_MIN", 10, 3), N("AVISTA", 12, 2), N("PRECO_BASE", 12, 2),
]
CLIENTES_FIELDS = [
    C("CODIGO", 6), C("NOME", 40), C("CPF", 14), C("ENDERECO", 40), C("CIDADE", 30),
    C("UF", 2), C("CEP", 9), C("FONE", 15), C("STATUS", 10), C("OBS", 60),
]
VENDEDOR_FIELDS = [C("CODIGO", 4), C("NOME", 30)]
FORMA_PG_FIELDS = [C("COD_FPG", 4), C("FORMA", 30)]
SALE_FIELDS = [
    C("PEDIDO", 8), D("EMISSAO"), C("COD_VEND", 4), C("COD_CLI", 6), C("COD_FPG", 4),
    N("SUB_TOTAL", 12, 2), N("DESCONTO", 12, 2), N("TOTAL_GERA", 12, 2),
    *[C(f"COD{i}", 10) for i in range(1, 8)],
    *[N(f"QTDE{i}", 10, 3) for i in range(1, 8)],
    *[N(f"VLR{i}", 12, 2) for i in range(1, 8)],
    *[N(f"TOTAL{i}", 12, 2) for i in range(1, 8)],
]
PAGAMENT_FIELDS = [
    C("COD_CLI", 6), N("VALOR_DOC", 12, 2), N("VLR_PAGO", 12, 2), N("RESTANTE", 12, 2), D("PAGAMENTO"),
]
MOV_EST_FIELDS = [
    C("TIP_MOV", 1), D("DATA"), C("COD_PROD", 10), N("QTDE", 10, 3),
    N("VALOR", 12, 2), N("TOTAL", 12, 2), C("NF", 10),
]

TABLE_FIELDS: dict[str, list[Field]] = {
    "GRUPO.DBF": GRUPO_FIELDS,
    "PRODUTO.DBF": PRODUTO_FIELDS,
    "CLIENTES.DBF": CLIENTES_FIELDS,
    "VENDEDOR.DBF": VENDEDOR_FIELDS,
    "FORMA_PG.DBF": FORMA_PG_FIELDS,
    "VENDAS.DBF": SALE_FIELDS,
    "PEDIDOS.DBF": SALE_FIELDS,
    "PAGAMENT.DBF": PAGAMENT_FIELDS,
    "MOV_EST.DBF": MOV_EST_FIELDS,
}


def write_table(directory: Path, filename: str, records: Iterable[dict[str, Any]], **kwargs) -> Path:
    return write_dbf(Path(directory) / filename, TABLE_FIELDS[filename.upper()], records, **kwargs)


# ── Sample export: 3 groups, 10 products (2 with unknown groups), 1 sale ──

SAMPLE_GROUPS = [
    {"COD_GRUP": "01", "NOME": "Bebidas"},
    {"COD_GRUP": "02", "NOME": "Mercearia"},
    {"COD_GRUP": "03", "NOME": "Limpeza"},
]

SAMPLE_PRODUCTS = [
    {
        "COD_PROD": f"P{i:03d}",
        "NOME_PROD": f"Produto {i}",
        "COD_BARRA": f"789000000{i:04d}",
        "COD_GRUP": ("01", "02", "03")[(i - 1) % 3],
        "ESTO_MIN": 5,
        "AVISTA": 10.5 * i,
        "PRECO_BASE": 9.0 * i,
    }
    for i in range(1, 9)
] + [
    {"COD_PROD": "P009", "NOME_PROD": "Produto 9", "COD_GRUP": "99", "AVISTA": 3.2},
    {"COD_PROD": "P010", "NOME_PROD": "Produto 10", "COD_GRUP": "98", "AVISTA": 4.8},
]

SAMPLE_CUSTOMERS = [
    {
        "CODIGO": "C1", "NOME": "Maria Souza", "CPF": "123.456.789-00", "ENDERECO": "Rua A, 10",
        "CIDADE": "São Paulo", "UF": "SP", "CEP": "01000-000", "FONE": "11 5555-0000", "STATUS": "ATIVO",
    },
    {"CODIGO": "C2", "NOME": "João Lima", "CIDADE": "Campinas", "UF": "SP"},
]

SAMPLE_SELLERS = [{"CODIGO": "V1", "NOME": "Carlos"}]

SAMPLE_SALES = [
    {
        "PEDIDO": "1001", "EMISSAO": date(2023, 5, 10), "COD_VEND": "V1", "COD_CLI": "C1",
        "SUB_TOTAL": 31.5, "DESCONTO": 1.5, "TOTAL_GERA": 30.0,
        "COD1": "P001", "QTDE1": 2, "VLR1": 10.5, "TOTAL1": 21.0,
        "COD3": "P003", "QTDE3": 1, "VLR3": 10.5, "TOTAL3": 10.5,
    },
]

SAMPLE_EXPORT: dict[str, list[dict[str, Any]]] = {
    "GRUPO.DBF": SAMPLE_GROUPS,
    "PRODUTO.DBF": SAMPLE_PRODUCTS,
    "CLIENTES.DBF": SAMPLE_CUSTOMERS,
    "VENDEDOR.DBF": SAMPLE_SELLERS,
    "VENDAS.DBF": SAMPLE_SALES,
}


def write_sample_export(directory: Path, **tables: Optional[list[dict[str, Any]]]) -> Path:
    """
    Write the sample export into directory. Keyword arguments override tables by
    file stem (e.g. VENDAS=[...], PEDIDOS=[...]); None leaves a table out.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    contents = dict(SAMPLE_EXPORT)
    for stem, records in tables.items():
        contents[f"{stem.upper()}.DBF"] = records
    for filename, records in contents.items():
        if records is not None:
            write_table(directory, filename, records)
    return directory
