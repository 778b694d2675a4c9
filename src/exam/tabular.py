"""
EduGen - Tabular Decoder
Yüklenen dosya baytlarını başlık → değer kayıtlarına çevirir.

Desteklenen formatlar:
    - .csv / .txt: UTF-8 (BOM opsiyonel), ayraç ';' veya ',' (başlık satırından tespit)
    - .xlsx / .xlsm: Sadece ilk çalışma sayfası, ilk dolu satır başlık (openpyxl)
    - .xls: Eski Excel 97-2003 formatı, aynı kurallar (xlrd)
"""
import io
import logging
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import xlrd
from xlrd.compdoc import CompDocError
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .errors import EmptyDocumentError, UnsupportedFileError
from .normalizer import BOM, clean_value

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".csv", ".txt"}
WORKBOOK_EXTENSIONS = {".xlsx", ".xlsm"}
LEGACY_WORKBOOK_EXTENSIONS = {".xls"}

_NEWLINE = re.compile(r"\r?\n")


@dataclass
class TabularDocument:
    """Çözümlenmiş tablo"""
    headers: List[str]
    rows: List[Dict[str, str]] = field(default_factory=list)
    source_format: str = "csv"
    separator: Optional[str] = None


def detect_separator(header_line: str) -> str:
    """Belge başına bir kez: başlıkta ';' varsa ';', yoksa ','."""
    return ";" if ";" in header_line else ","


def unique_headers(raw_headers: Sequence[Any]) -> List[str]:
    """
    Başlıkları temizler ve benzersiz yapar.

    Boş başlıklar "columna_N" olur, tekrar edenler "_2", "_3" son eki alır;
    böylece konum bazlı eşleme hiçbir sütunu kaybetmez.
    """
    headers: List[str] = []
    seen: Dict[str, int] = {}
    for position, raw in enumerate(raw_headers, 1):
        name = clean_value(raw) or f"columna_{position}"
        count = seen.get(name, 0) + 1
        seen[name] = count
        headers.append(name if count == 1 else f"{name}_{count}")
    return headers


def _to_records(headers: List[str], value_rows: Sequence[Sequence[Any]]) -> List[Dict[str, str]]:
    records = []
    for values in value_rows:
        record = {}
        for i, header in enumerate(headers):
            value = values[i] if i < len(values) else ""
            record[header] = "" if value is None else str(value)
        records.append(record)
    return records


def parse_delimited_text(text: str) -> TabularDocument:
    """
    Ayraçlı metni kayıtlara böler.

    Satırlar ham yeni satırlardan (\\n veya \\r\\n) bölünür, boş satırlar
    ayrıştırmadan önce atılır. Tırnak temizliği normalizer'a bırakılır.

    Raises:
        EmptyDocumentError: Başlık ya da veri satırı yoksa
    """
    if text.startswith(BOM):
        text = text[1:]

    lines = [line for line in _NEWLINE.split(text) if line.strip()]
    if not lines:
        raise EmptyDocumentError("El archivo está vacío.")

    separator = detect_separator(lines[0])
    headers = unique_headers(lines[0].split(separator))

    if len(lines) < 2:
        raise EmptyDocumentError("El archivo solo contiene la fila de encabezados.")

    rows = _to_records(headers, [line.split(separator) for line in lines[1:]])
    return TabularDocument(headers=headers, rows=rows, source_format="csv", separator=separator)


def _cell_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_blank_row(row: Sequence[Any]) -> bool:
    return not any(cell is not None and str(cell).strip() for cell in row)


def _sheet_document(raw_rows: Sequence[Sequence[Any]], source_format: str) -> TabularDocument:
    """İlk dolu satır başlık; tamamen boş satırlar atlanır."""
    value_rows = [
        [_cell_to_text(cell) for cell in row]
        for row in raw_rows
        if not _is_blank_row(row)
    ]
    if not value_rows:
        raise EmptyDocumentError("La hoja de cálculo está vacía.")

    headers = unique_headers(value_rows[0])
    if len(value_rows) < 2:
        raise EmptyDocumentError("La hoja de cálculo solo contiene la fila de encabezados.")

    return TabularDocument(
        headers=headers,
        rows=_to_records(headers, value_rows[1:]),
        source_format=source_format
    )


def read_workbook(data: bytes) -> TabularDocument:
    """
    İlk çalışma sayfasını okur (openpyxl, read-only, sadece değerler).

    Raises:
        UnsupportedFileError: Dosya geçerli bir çalışma kitabı değilse
        EmptyDocumentError: Başlık ya da veri satırı yoksa
    """
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        logger.warning(f"Çalışma kitabı açılamadı: {e}")
        raise UnsupportedFileError("No se pudo leer la hoja de cálculo.") from e

    try:
        if not workbook.worksheets:
            raise EmptyDocumentError("La hoja de cálculo no contiene hojas.")
        raw_rows = list(workbook.worksheets[0].iter_rows(values_only=True))
    finally:
        workbook.close()

    return _sheet_document(raw_rows, "xlsx")


def read_legacy_workbook(data: bytes) -> TabularDocument:
    """
    Excel 97-2003 (.xls) dosyasının ilk sayfasını okur (xlrd).

    Raises:
        UnsupportedFileError: Dosya geçerli bir .xls değilse
        EmptyDocumentError: Başlık ya da veri satırı yoksa
    """
    try:
        book = xlrd.open_workbook(file_contents=data, on_demand=True)
    except (xlrd.XLRDError, CompDocError, OSError) as e:
        logger.warning(f".xls dosyası açılamadı: {e}")
        raise UnsupportedFileError("No se pudo leer la hoja de cálculo.") from e

    try:
        if book.nsheets == 0:
            raise EmptyDocumentError("La hoja de cálculo no contiene hojas.")
        sheet = book.sheet_by_index(0)
        raw_rows = [sheet.row_values(r) for r in range(sheet.nrows)]
    finally:
        book.release_resources()

    return _sheet_document(raw_rows, "xls")


def decode_text(data: bytes) -> str:
    """UTF-8 decode, cp1252 (Excel'in Windows CSV çıktısı) ile geri dönüş."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Dosya UTF-8 değil, cp1252 olarak okunuyor")
        return data.decode("cp1252", errors="replace")


def parse_tabular(data: bytes, filename: str) -> TabularDocument:
    """
    Dosya uzantısına göre uygun çözücüyü seçer.

    Args:
        data: Dosya içeriği
        filename: Orijinal dosya adı (uzantı için)

    Returns:
        TabularDocument

    Raises:
        UnsupportedFileError: Uzantı desteklenmiyorsa
        EmptyDocumentError: İçerik yoksa
    """
    extension = Path(filename or "").suffix.lower()

    if extension in TEXT_EXTENSIONS:
        return parse_delimited_text(decode_text(data))
    if extension in WORKBOOK_EXTENSIONS:
        return read_workbook(data)
    if extension in LEGACY_WORKBOOK_EXTENSIONS:
        return read_legacy_workbook(data)

    raise UnsupportedFileError(
        f"Formato no soportado: '{extension or filename}'. Usa un archivo .csv, .xlsx o .xls."
    )
