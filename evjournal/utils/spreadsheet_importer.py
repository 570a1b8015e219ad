"""Spreadsheet importer for charge and trip journals (CSV and XLSX)."""

import csv
import io
import logging
import re
import uuid
import zipfile
from pathlib import PurePath
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from evjournal.calculations.tariffs import TariffType, parse_tariff
from evjournal.config import Config
from evjournal.exceptions import ImportValidationError, UnsupportedFileError
from evjournal.models import Charge, RecordStatus, Trip
from evjournal.utils.import_utils import format_reportable, generate_import_code, get_file_hash
from evjournal.utils.text_utils import normalize_label
from evjournal.utils.time_utils import parse_date
from evjournal.utils.wide_events import log_import_event

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = {'.csv'}
XLSX_EXTENSIONS = {'.xlsx', '.xlsm'}

# Accepted spellings of a true "billed" cell
BILLED_TRUE_VALUES = {'true', 'vrai', 'oui', 'yes', '1'}

# "80% → 100%" or "80% -> 100%"
BATTERY_RANGE_RE = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*%\s*(?:→|->)\s*(\d+(?:[.,]\d+)?)\s*%"
)


class RowError(ValueError):
    """A cell of a row could not be read."""


# =============================================================================
# Reading
# =============================================================================

def _decode(content: Union[bytes, str]) -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError:
        return content.decode('latin-1')


def read_csv_rows(content: Union[bytes, str]) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Read CSV content into its header and a list of row dicts."""
    text = _decode(content)

    try:
        # Try to detect delimiter
        dialect = csv.Sniffer().sniff(text[:2000], delimiters=',;\t')
    except csv.Error:
        dialect = csv.excel

    reader = csv.DictReader(io.StringIO(text), dialect=dialect)
    rows = list(reader)
    return list(reader.fieldnames or []), rows


def read_xlsx_rows(content: bytes) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Read the first worksheet of an XLSX workbook into its header and row dicts."""
    try:
        wb = load_workbook(filename=io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise UnsupportedFileError(f"Not a readable XLSX workbook: {e}")

    try:
        ws = wb.worksheets[0] if wb.worksheets else None
        if ws is None:
            return [], []

        rows_iter = ws.iter_rows(values_only=True)
        headers = next(rows_iter, None)
        if not headers:
            return [], []

        headers = [str(h) if h is not None else f"col_{i}" for i, h in enumerate(headers)]
        rows = [dict(zip(headers, row)) for row in rows_iter]
        return headers, rows
    finally:
        wb.close()


def read_rows(content: Union[bytes, str], filename: str) -> Tuple[List[str], List[Dict[str, Any]]]:
    """
    Read a spreadsheet file, dispatching on its extension.

    Args:
        content: Raw file content
        filename: Original file name (.csv, .xlsx or .xlsm)

    Returns:
        Tuple of (header names, list of row dicts keyed by header)

    Raises:
        UnsupportedFileError: Unknown extension or unreadable workbook
    """
    extension = PurePath(filename or '').suffix.lower()

    if extension in CSV_EXTENSIONS:
        return read_csv_rows(content)
    if extension in XLSX_EXTENSIONS:
        if isinstance(content, str):
            raise UnsupportedFileError("XLSX content must be bytes", filename=filename)
        return read_xlsx_rows(content)

    raise UnsupportedFileError(f"Unsupported file type '{extension or filename}'", filename=filename)


# =============================================================================
# Cell parsing
# =============================================================================

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_number(value: Any) -> float:
    """
    Parse a numeric cell; accepts a comma decimal separator and a trailing %.

    Raises:
        RowError: The cell is not a number
    """
    if isinstance(value, bool):
        raise RowError(f"expected a number, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip().replace('\u00a0', '').replace(' ', '')
    text = text.rstrip('%').replace(',', '.')
    try:
        return float(text)
    except ValueError:
        raise RowError(f"expected a number, got {value!r}")


def parse_billed(value: Any) -> bool:
    """Whether a "billed" cell reads as true (true/vrai/oui/yes/1)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    return normalize_label(value) in BILLED_TRUE_VALUES


def parse_battery_range(value: Any) -> Tuple[float, float]:
    """
    Split a combined battery cell such as "80% → 100%" into its two percentages.

    Raises:
        RowError: The cell does not have the "X% → Y%" shape
    """
    match = BATTERY_RANGE_RE.search(str(value))
    if not match:
        raise RowError(f"invalid battery range {value!r}, expected \"X% → Y%\"")
    return parse_number(match.group(1)), parse_number(match.group(2))


def _parse_row_date(value: Any):
    parsed = parse_date(value)
    if parsed is None:
        raise RowError(f"invalid date {value!r}")
    return parsed


# =============================================================================
# Importers
# =============================================================================

class SpreadsheetImporter:
    """
    Base for journal spreadsheet importers.

    Header cells are normalized (trimmed, lowercased, accents removed) and
    looked up in COLUMN_MAP. Rows missing a required field are skipped;
    rows with an unreadable cell are reported as "Row N: ..." and reject
    the whole file.
    """

    RECORD_KIND = ''
    COLUMN_MAP: Dict[str, str] = {}
    REQUIRED_FIELDS: Tuple[str, ...] = ()

    @classmethod
    def map_columns(cls, headers: Iterable[str]) -> Dict[str, str]:
        """Map raw header names to field names; unknown columns are dropped."""
        column_mapping = {}
        for header in headers:
            field = cls.COLUMN_MAP.get(normalize_label(header))
            if field:
                column_mapping[header] = field
        return column_mapping

    @classmethod
    def _map_row(cls, row: Dict[str, Any], column_mapping: Dict[str, str]) -> Dict[str, Any]:
        mapped = {}
        for header, field in column_mapping.items():
            value = row.get(header)
            if not _is_blank(value):
                mapped.setdefault(field, value)
        return mapped

    @classmethod
    def _prepare(cls, mapped: Dict[str, Any]) -> Dict[str, Any]:
        return mapped

    @classmethod
    def _build_record(cls, mapped: Dict[str, Any], vehicle_id: Optional[str]):
        raise NotImplementedError

    @classmethod
    def duplicate_key(cls, record) -> Hashable:
        raise NotImplementedError

    @classmethod
    def _find_duplicates(cls, records: List, existing: Optional[Iterable] = None) -> Tuple[List, int]:
        """
        Drop records already present in existing, or earlier in the same import.

        Returns:
            Tuple of (unique records, count of duplicates removed)
        """
        seen = {cls.duplicate_key(r) for r in existing or ()}
        unique_records = []
        duplicate_count = 0

        for record in records:
            key = cls.duplicate_key(record)
            if key in seen:
                duplicate_count += 1
            else:
                seen.add(key)
                unique_records.append(record)

        return unique_records, duplicate_count

    @classmethod
    def parse(
        cls,
        content: Union[bytes, str],
        filename: str,
        existing: Optional[Iterable] = None,
        vehicle_id: Optional[str] = None
    ) -> Tuple[List, Dict[str, Any]]:
        """
        Parse a spreadsheet into new records.

        Args:
            content: Raw file content
            filename: Original file name, its extension selects the reader
            existing: Records already in the journal, for duplicate detection
            vehicle_id: Vehicle to attach the imported records to

        Returns:
            Tuple of (new records, stats dict)

        Raises:
            UnsupportedFileError: The file cannot be read
            ImportValidationError: At least one row has an unreadable cell;
                                   no record is returned
        """
        import_code = generate_import_code()
        stats = {
            'import_code': import_code,
            'file_hash': get_file_hash(content),
            'total_rows': 0,
            'parsed_rows': 0,
            'skipped_rows': 0,
            'duplicates_removed': 0,
            'columns_found': [],
            'errors': [],
        }

        headers, rows = read_rows(content, filename)
        column_mapping = cls.map_columns(headers)
        stats['columns_found'] = list(column_mapping.values())

        records = []
        errors = []
        for row_num, row in enumerate(rows, start=2):  # Start at 2 (header is row 1)
            if all(_is_blank(v) for v in row.values()):
                continue
            stats['total_rows'] += 1

            try:
                mapped = cls._prepare(cls._map_row(row, column_mapping))
                if any(f not in mapped for f in cls.REQUIRED_FIELDS):
                    stats['skipped_rows'] += 1
                    continue
                records.append(cls._build_record(mapped, vehicle_id))
                stats['parsed_rows'] += 1
            except RowError as e:
                stats['skipped_rows'] += 1
                errors.append(f"Row {row_num}: {e}")

        if errors:
            stats['errors'] = errors[:Config.IMPORT_MAX_ERRORS]
            reportable = format_reportable(
                import_code, 'failed', cls.RECORD_KIND,
                parsed_rows=0, total_rows=stats['total_rows'], error_count=len(errors)
            )
            logger.warning(f"Rejected {cls.RECORD_KIND} import {filename}: {reportable}")
            log_import_event(
                import_code, cls.RECORD_KIND, success=False,
                filename=filename, total_rows=stats['total_rows'],
                error_count=len(errors), error=errors[0],
            )
            raise ImportValidationError(stats['errors'], filename=filename)

        records, duplicate_count = cls._find_duplicates(records, existing)
        stats['duplicates_removed'] = duplicate_count

        reportable = format_reportable(
            import_code, 'success', cls.RECORD_KIND,
            parsed_rows=len(records), total_rows=stats['total_rows'], duplicates=duplicate_count
        )
        logger.info(f"Imported {cls.RECORD_KIND} from {filename}: {reportable}")
        log_import_event(
            import_code, cls.RECORD_KIND, success=True,
            filename=filename, total_rows=stats['total_rows'],
            parsed_rows=stats['parsed_rows'], duplicates_skipped=duplicate_count,
        )

        return records, stats


class ChargeSheetImporter(SpreadsheetImporter):
    """Charges: one completed charging session per row."""

    RECORD_KIND = 'charges'

    COLUMN_MAP = {
        'date': 'date',
        'kilometrage (km)': 'odometer',
        'kilometrage': 'odometer',
        'odometer': 'odometer',
        'odometer (km)': 'odometer',
        'batterie avant (%)': 'start_percentage',
        'batterie apres (%)': 'end_percentage',
        'battery start (%)': 'start_percentage',
        'battery end (%)': 'end_percentage',
        'batterie': 'battery_range',
        'battery': 'battery_range',
        'tarif': 'tariff',
        'tariff': 'tariff',
        'prix/kwh (€)': 'custom_price',
        'prix/kwh': 'custom_price',
        'price/kwh': 'custom_price',
    }

    REQUIRED_FIELDS = ('date', 'odometer', 'start_percentage', 'end_percentage', 'tariff')

    @classmethod
    def _prepare(cls, mapped: Dict[str, Any]) -> Dict[str, Any]:
        battery_range = mapped.pop('battery_range', None)
        if battery_range is not None and 'start_percentage' not in mapped and 'end_percentage' not in mapped:
            mapped['start_percentage'], mapped['end_percentage'] = parse_battery_range(battery_range)
        return mapped

    @classmethod
    def _build_record(cls, mapped: Dict[str, Any], vehicle_id: Optional[str]) -> Charge:
        charge_date = _parse_row_date(mapped['date'])
        odometer = parse_number(mapped['odometer'])
        start_percentage = parse_number(mapped['start_percentage'])
        end_percentage = parse_number(mapped['end_percentage'])

        tariff = parse_tariff(mapped['tariff'])
        if tariff is None:
            raise RowError(f"unknown tariff {mapped['tariff']!r}")

        custom_price = None
        if tariff == TariffType.QUICK_CHARGE:
            try:
                custom_price = parse_number(mapped.get('custom_price', ''))
            except RowError:
                custom_price = None
            if custom_price is None or custom_price <= 0:
                raise RowError("quick charge requires a positive price per kWh")

        return Charge(
            id=str(uuid.uuid4()),
            date=charge_date,
            odometer=odometer,
            start_percentage=start_percentage,
            end_percentage=end_percentage,
            tariff=tariff,
            custom_price=custom_price,
            status=RecordStatus.COMPLETED,
            vehicle_id=vehicle_id,
        )

    @classmethod
    def duplicate_key(cls, record: Charge) -> Hashable:
        return record.odometer


class TripSheetImporter(SpreadsheetImporter):
    """Trips: one completed business trip per row."""

    RECORD_KIND = 'trips'

    COLUMN_MAP = {
        'date': 'date',
        'destination': 'destination',
        'client': 'client',
        'km depart': 'start_odometer',
        'km arrivee': 'end_odometer',
        'start odometer': 'start_odometer',
        'end odometer': 'end_odometer',
        'batterie depart (%)': 'start_percentage',
        'batterie arrivee (%)': 'end_percentage',
        'battery start (%)': 'start_percentage',
        'battery end (%)': 'end_percentage',
        'facture': 'is_billed',
        'billed': 'is_billed',
    }

    REQUIRED_FIELDS = (
        'date', 'destination', 'start_odometer', 'end_odometer',
        'start_percentage', 'end_percentage',
    )

    @classmethod
    def _build_record(cls, mapped: Dict[str, Any], vehicle_id: Optional[str]) -> Trip:
        trip_date = _parse_row_date(mapped['date'])
        client = mapped.get('client')

        return Trip(
            id=str(uuid.uuid4()),
            date=trip_date,
            destination=str(mapped['destination']).strip(),
            start_odometer=parse_number(mapped['start_odometer']),
            end_odometer=parse_number(mapped['end_odometer']),
            start_percentage=parse_number(mapped['start_percentage']),
            end_percentage=parse_number(mapped['end_percentage']),
            is_billed=parse_billed(mapped.get('is_billed', '')),
            client=str(client).strip() if client is not None else None,
            status=RecordStatus.COMPLETED,
            vehicle_id=vehicle_id,
        )

    @classmethod
    def duplicate_key(cls, record: Trip) -> Hashable:
        return (record.date, record.start_odometer)


def parse_charges_file(
    content: Union[bytes, str],
    filename: str,
    existing: Optional[Iterable[Charge]] = None,
    vehicle_id: Optional[str] = None
) -> Tuple[List[Charge], Dict[str, Any]]:
    """Import charges from a CSV or XLSX file. See SpreadsheetImporter.parse."""
    return ChargeSheetImporter.parse(content, filename, existing, vehicle_id)


def parse_trips_file(
    content: Union[bytes, str],
    filename: str,
    existing: Optional[Iterable[Trip]] = None,
    vehicle_id: Optional[str] = None
) -> Tuple[List[Trip], Dict[str, Any]]:
    """Import trips from a CSV or XLSX file. See SpreadsheetImporter.parse."""
    return TripSheetImporter.parse(content, filename, existing, vehicle_id)
