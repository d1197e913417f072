# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Excel (.xlsx) export and import of connections.

Secrets are never exported – ciphertexts are meaningless outside this
installation and plaintext does not belong in a spreadsheet.  Imported
connections therefore arrive without credentials.
"""

import io
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter
from pydantic import ValidationError as PydanticValidationError

from connections.mapper import parse_tag_ids
from connections.schemas import ConnectionCreateData, ConnectionWithTags

_HEADER_FONT  = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_HEADER_FILL  = PatternFill(start_color="2F6FEB", end_color="2F6FEB", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_THIN_BORDER  = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)

EXPORT_HEADERS = [
    "Name", "Type", "Host", "Port", "Username", "Auth Method",
    "Proxy Type", "Jump Chain", "Tags", "Notes",
]
_COL_MIN = [24, 8, 28, 8, 18, 14, 12, 16, 28, 36]

_DEFAULT_PORTS = {"SSH": 22, "RDP": 3389, "VNC": 5900}


class WorkbookFormatError(ValueError):
    """The upload is not an .xlsx file this module can read."""


@dataclass
class ParsedImport:
    rows: List[ConnectionCreateData] = field(default_factory=list)
    tag_names: List[List[str]] = field(default_factory=list)
    skipped_invalid: int = 0


def export_connections(connections: Sequence[ConnectionWithTags], tag_names: Dict[int, str]) -> bytes:
    """Render *connections* as an .xlsx workbook and return its bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Connections"

    # -- Header row ----------------------------------------------------------
    ws.append(EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN
        cell.border = _THIN_BORDER

    # -- Data rows -----------------------------------------------------------
    for conn in connections:
        ws.append([
            conn.name or "",
            conn.type,
            conn.host,
            conn.port,
            conn.username,
            conn.auth_method,
            conn.proxy_type or "",
            ",".join(str(hop) for hop in conn.jump_chain or []),
            ", ".join(tag_names[t] for t in conn.tag_ids if t in tag_names),
            conn.notes or "",
        ])
        row_idx = ws.max_row
        for col_idx in range(1, len(EXPORT_HEADERS) + 1):
            ws.cell(row=row_idx, column=col_idx).border = _THIN_BORDER

    for col_idx, min_w in enumerate(_COL_MIN, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = min_w

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def parse_connections_workbook(raw: bytes) -> ParsedImport:
    """
    Read an .xlsx produced by :func:`export_connections` (or hand-made with
    the same headers, any order, case-insensitive).  Rows without a host or
    with an unknown type / auth method are counted as invalid and skipped.
    """
    try:
        wb = load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    except Exception as exc:
        raise WorkbookFormatError("Could not parse the uploaded file as .xlsx") from exc

    try:
        ws = wb.active
        if ws is None:
            raise WorkbookFormatError("Workbook has no active sheet")

        header_row = next(ws.iter_rows(min_row=1, max_row=1, values_only=True), None)
        if header_row is None:
            raise WorkbookFormatError("Sheet is empty")

        col_map: Dict[str, int] = {}  # lowercase name → 0-based index
        for idx, cell_val in enumerate(header_row):
            if cell_val and isinstance(cell_val, str):
                col_map[cell_val.strip().lower()] = idx
        if "host" not in col_map:
            raise WorkbookFormatError("Missing required column: host")

        parsed = ParsedImport()
        for row in ws.iter_rows(min_row=2, values_only=True):
            if not any(v not in (None, "") for v in row):
                continue
            data = _row_to_connection(row, col_map)
            if data is None:
                parsed.skipped_invalid += 1
                continue
            tags = _cell_str(row, col_map.get("tags"))
            parsed.rows.append(data)
            parsed.tag_names.append([t.strip() for t in tags.split(",") if t.strip()])
        return parsed
    finally:
        wb.close()


def _row_to_connection(row: tuple, col_map: Dict[str, int]) -> Optional[ConnectionCreateData]:
    host = _cell_str(row, col_map.get("host"))
    if not host:
        return None
    conn_type = (_cell_str(row, col_map.get("type")) or "SSH").upper()
    port_str = _cell_str(row, col_map.get("port"))
    if port_str:
        if not port_str.isdigit():
            return None
        port = int(port_str)
    else:
        port = _DEFAULT_PORTS.get(conn_type, 22)

    try:
        return ConnectionCreateData(
            name=_cell_str(row, col_map.get("name")) or None,
            type=conn_type,
            host=host,
            port=port,
            username=_cell_str(row, col_map.get("username")),
            auth_method=(_cell_str(row, col_map.get("auth method")) or "password").lower(),
            proxy_type=_cell_str(row, col_map.get("proxy type")).lower() or None,
            jump_chain=parse_tag_ids(_cell_str(row, col_map.get("jump chain"))) or None,
            notes=_cell_str(row, col_map.get("notes")) or None,
        )
    except PydanticValidationError:
        return None


def _cell_str(row: tuple, col_idx: Optional[int]) -> str:
    """Safely extract a string value from a row tuple by column index."""
    if col_idx is None or col_idx >= len(row):
        return ""
    val = row[col_idx]
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    return str(val).strip() if val is not None else ""
