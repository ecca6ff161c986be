from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

from flightsla.schema import CellValue, Record

# Accepted header spellings per semantic field. Matching is exact after
# trimming and case-folding; the first header (in sheet order) that matches wins.
FIELD_VARIANTS: Dict[str, Tuple[str, ...]] = {
    "flight_id": ("ID Voo",),
    "landing": ("Pouso", "Data Pouso", "Data do Pouso", "Data/Hora Pouso", "Horário de Pouso", "Data"),
    "std": ("Previsão Decolagem", "STD"),
    "checkin_open": ("Abertura CHECK IN",),
    "checkin_close": ("Fechamento CHECK IN",),
    "boarding_start": ("Início Embarque",),
    "last_pax": ("Último PAX a bordo",),
    "pax": ("PAX Atendidos", "PAX"),
    "bags": ("BAGS de Mão Atendidos",),
    "orbital_punctuality": ("% de PONTUALIDADE ORBITAL",),
    "base_punctuality": ("% DE PONTUALIDADE DA BASE",),
    "pushback": ("PUSH BACK", "Push-back", "Horário Pushback", "Horário PUSH BACK"),
    "lf_cutoff": ("Horário de Corte (Anti Colisão)",),
    "lf_ahl_open": ("Horário Abertura AHL",),
    "lf_ohd_open": ("Horário Abertura OHD",),
    "lf_ahl_delivered": ("AHL Entregue a Transportadora",),
    "lf_content_list": ("Data/Hr Lista de Conteúdo Solicitada",),
}

# Fields without which a table cannot be filtered into months at all.
REQUIRED_FIELDS: Tuple[str, ...] = ("landing",)


class MissingColumnError(KeyError):
    """Raised at the loading boundary when a required field has no matching header."""

    def __init__(self, fields: Sequence[str]):
        self.fields = tuple(fields)
        names = ", ".join(f"'{f}' ({' / '.join(FIELD_VARIANTS.get(f, ()))})" for f in self.fields)
        super().__init__(f"Required column(s) not found in the sheet headers: {names}")

    def __str__(self) -> str:
        return self.args[0]


def _normalize(text: str) -> str:
    return str(text).strip().casefold()


def resolve_column(headers: Iterable[str], variants: Iterable[str]) -> str:
    """Returns the first header matching one of the variants, or '' when none does."""
    wanted = {_normalize(v) for v in variants}
    for header in headers:
        if _normalize(header) in wanted:
            return header
    return ""


@dataclass(frozen=True)
class ColumnMap:
    mapping: Dict[str, str]

    def get(self, field: str) -> str:
        return self.mapping.get(field, "")

    @property
    def missing(self) -> Tuple[str, ...]:
        return tuple(f for f, header in self.mapping.items() if not header)

    def value(self, record: Record, field: str) -> CellValue:
        header = self.get(field)
        if not header:
            return ""
        value = record.get(header, "")
        return "" if value is None else value


def resolve_columns(
    headers: Sequence[str],
    overrides: Optional[Mapping[str, str]] = None,
    variants: Mapping[str, Tuple[str, ...]] = FIELD_VARIANTS,
) -> ColumnMap:
    """
    Resolves every semantic field against a table's headers once.

    Args:
        headers: The table's header row.
        overrides: Optional field -> header pins (e.g. from SLA_DATE_COLUMN).
            An override naming a header that is not present resolves to ''.
        variants: Field -> accepted spellings.

    Returns:
        A ColumnMap reused for every record of the table.
    """
    overrides = overrides or {}
    mapping = {}
    for field, names in variants.items():
        if overrides.get(field):
            mapping[field] = resolve_column(headers, (overrides[field],))
        else:
            mapping[field] = resolve_column(headers, names)
    return ColumnMap(mapping=mapping)


def require_columns(columns: ColumnMap, fields: Sequence[str] = REQUIRED_FIELDS) -> None:
    missing = [f for f in fields if not columns.get(f)]
    if missing:
        raise MissingColumnError(missing)
