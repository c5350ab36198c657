"""
Export utilities for career analytics data.
Supports Excel (.xlsx), CSV (.csv) and JSON (.json) formats.
"""
import csv
import io
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter


class ExportFormat:
    EXCEL = 'xlsx'
    CSV = 'csv'
    JSON = 'json'

    CHOICES = [CSV, EXCEL, JSON]
    CONTENT_TYPES = {
        EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        CSV: 'text/csv',
        JSON: 'application/json',
    }


def format_value(value: Any) -> str:
    """Format a value for export."""
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    if isinstance(value, dict):
        return '; '.join(f"{k}: {v}" for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return ', '.join(str(v) for v in value)
    return str(value)


def export_to_excel(
    data: list[dict],
    columns: list[dict],
    title: str = 'Export',
    sheet_name: str = 'Data',
) -> bytes:
    """
    Export data to Excel format.

    Args:
        data: List of dictionaries containing the data
        columns: List of column definitions with 'key', 'header', and optional 'width'
        title: Title for the export (used in header row)
        sheet_name: Name of the worksheet

    Returns:
        Bytes of the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]

    header_font = Font(bold=True, color='FFFFFF')
    header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
    header_alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    # Title row
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(columns))
    title_cell = ws.cell(row=1, column=1, value=title)
    title_cell.font = Font(bold=True, size=14)
    title_cell.alignment = Alignment(horizontal='center')

    # Export timestamp
    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=len(columns))
    timestamp_cell = ws.cell(row=2, column=1, value=f"Exported: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    timestamp_cell.alignment = Alignment(horizontal='center')
    timestamp_cell.font = Font(italic=True, size=10, color='666666')

    header_row = 4
    for col_idx, col in enumerate(columns, 1):
        cell = ws.cell(row=header_row, column=col_idx, value=col['header'])
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border
        ws.column_dimensions[get_column_letter(col_idx)].width = col.get('width', 15)

    for row_idx, row_data in enumerate(data, header_row + 1):
        for col_idx, col in enumerate(columns, 1):
            value = row_data.get(col['key'], '')
            # Numbers stay numeric so spreadsheets can sum them
            if col.get('numeric') and isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
                cell = ws.cell(row=row_idx, column=col_idx, value=float(value))
                cell.alignment = Alignment(horizontal='right')
            else:
                cell = ws.cell(row=row_idx, column=col_idx, value=format_value(value))
            cell.border = thin_border

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def export_to_csv(
    data: list[dict],
    columns: list[dict],
    delimiter: str = ',',
) -> str:
    """
    Export data to CSV format.

    Args:
        data: List of dictionaries containing the data
        columns: List of column definitions with 'key' and 'header'
        delimiter: CSV delimiter character

    Returns:
        CSV string
    """
    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL)

    writer.writerow([col['header'] for col in columns])
    for row_data in data:
        writer.writerow([format_value(row_data.get(col['key'], '')) for col in columns])

    return output.getvalue()


def export_to_json(payload: Any) -> str:
    """Serialize the structured analytics payload as pretty JSON."""
    return json.dumps(payload, cls=DjangoJSONEncoder, indent=2)


def create_export_response(
    data: list[dict],
    columns: list[dict],
    format: str,
    filename: str,
    title: str = 'Export',
    payload: Any = None,
) -> HttpResponse:
    """
    Create an HTTP response with the exported file.

    Args:
        data: Flattened rows for tabular formats
        columns: List of column definitions
        format: Export format (xlsx, csv, json)
        filename: Base filename (without extension)
        title: Title for Excel export
        payload: Structured data for JSON export (defaults to `data`)

    Returns:
        HttpResponse with the file content
    """
    if format not in ExportFormat.CHOICES:
        raise ValueError(f"Invalid format: {format}. Must be one of {ExportFormat.CHOICES}")

    content_type = ExportFormat.CONTENT_TYPES[format]
    full_filename = f"{filename}.{format}"

    if format == ExportFormat.EXCEL:
        content = export_to_excel(data, columns, title=title, sheet_name=title)
        response = HttpResponse(content, content_type=content_type)
    elif format == ExportFormat.CSV:
        content = export_to_csv(data, columns)
        response = HttpResponse(content, content_type=content_type)
        response.charset = 'utf-8-sig'  # BOM for Excel compatibility
    else:  # JSON
        content = export_to_json(payload if payload is not None else data)
        response = HttpResponse(content, content_type=content_type)

    response['Content-Disposition'] = f'attachment; filename="{full_filename}"'
    return response


# =============================================================================
# Column configuration per analytics data type
# =============================================================================

SECTION_EXPORT_COLUMNS = [
    {'key': 'section', 'header': 'Section', 'width': 25},
    {'key': 'name', 'header': 'Name', 'width': 30},
    {'key': 'value', 'header': 'Value', 'width': 18, 'numeric': True},
]

PROGRAM_EFFECTIVENESS_EXPORT_COLUMNS = [
    {'key': 'program_name', 'header': 'Program', 'width': 30},
    {'key': 'department', 'header': 'Department', 'width': 25},
    {'key': 'graduation_year', 'header': 'Graduation Year', 'width': 12},
    {'key': 'total_graduates', 'header': 'Graduates', 'width': 12, 'numeric': True},
    {'key': 'employment_rate_6_months', 'header': 'Employed @ 6 Months (%)', 'width': 16, 'numeric': True},
    {'key': 'employment_rate_1_year', 'header': 'Employed @ 1 Year (%)', 'width': 16, 'numeric': True},
    {'key': 'employment_rate_2_years', 'header': 'Employed @ 2 Years (%)', 'width': 16, 'numeric': True},
    {'key': 'avg_starting_salary', 'header': 'Avg Starting Salary', 'width': 16, 'numeric': True},
    {'key': 'avg_salary_1_year', 'header': 'Avg Salary @ 1 Year', 'width': 16, 'numeric': True},
    {'key': 'avg_salary_2_years', 'header': 'Avg Salary @ 2 Years', 'width': 16, 'numeric': True},
    {'key': 'top_employers', 'header': 'Top Employers', 'width': 40},
    {'key': 'skills_gaps', 'header': 'Skills Gaps', 'width': 40},
    {'key': 'overall_effectiveness_score', 'header': 'Effectiveness Score', 'width': 14, 'numeric': True},
]

INDUSTRY_PLACEMENT_EXPORT_COLUMNS = [
    {'key': 'industry', 'header': 'Industry', 'width': 25},
    {'key': 'program', 'header': 'Program', 'width': 30},
    {'key': 'graduation_year', 'header': 'Graduation Year', 'width': 12},
    {'key': 'placement_count', 'header': 'Placements', 'width': 12, 'numeric': True},
    {'key': 'avg_starting_salary', 'header': 'Avg Starting Salary', 'width': 16, 'numeric': True},
    {'key': 'avg_current_salary', 'header': 'Avg Current Salary', 'width': 16, 'numeric': True},
    {'key': 'retention_rate', 'header': 'Retention (%)', 'width': 12, 'numeric': True},
    {'key': 'top_companies', 'header': 'Top Companies', 'width': 40},
    {'key': 'skills_in_demand', 'header': 'Skills In Demand', 'width': 40},
]

DEMOGRAPHIC_OUTCOME_EXPORT_COLUMNS = [
    {'key': 'demographic_type', 'header': 'Demographic', 'width': 18},
    {'key': 'demographic_value', 'header': 'Group', 'width': 20},
    {'key': 'graduation_year', 'header': 'Graduation Year', 'width': 12},
    {'key': 'program', 'header': 'Program', 'width': 30},
    {'key': 'total_graduates', 'header': 'Graduates', 'width': 12, 'numeric': True},
    {'key': 'employed_count', 'header': 'Employed', 'width': 12, 'numeric': True},
    {'key': 'employment_rate', 'header': 'Employment Rate (%)', 'width': 16, 'numeric': True},
    {'key': 'avg_salary', 'header': 'Avg Salary', 'width': 16, 'numeric': True},
]

TREND_EXPORT_COLUMNS = [
    {'key': 'trend_type', 'header': 'Trend', 'width': 20},
    {'key': 'category', 'header': 'Category', 'width': 18},
    {'key': 'category_value', 'header': 'Category Value', 'width': 25},
    {'key': 'period_start', 'header': 'Period Start', 'width': 12},
    {'key': 'period_end', 'header': 'Period End', 'width': 12},
    {'key': 'value', 'header': 'Value', 'width': 15, 'numeric': True},
    {'key': 'change_percentage', 'header': 'Change (%)', 'width': 12, 'numeric': True},
]

ROW_EXPORT_COLUMNS = {
    'program_effectiveness': PROGRAM_EFFECTIVENESS_EXPORT_COLUMNS,
    'industry_placement': INDUSTRY_PLACEMENT_EXPORT_COLUMNS,
    'demographic_outcomes': DEMOGRAPHIC_OUTCOME_EXPORT_COLUMNS,
    'trends': TREND_EXPORT_COLUMNS,
}


def flatten_sections(payload: dict) -> list[dict]:
    """
    Flatten a sectioned analytics dict (overview, salary analysis, career
    paths) into section/name/value rows.

    Scalars become one row; dicts become one row per key; lists of dicts
    use their first string field as the name and the first numeric field
    after it as the value.
    """
    rows = []
    for section, content in payload.items():
        if isinstance(content, dict):
            for name, value in content.items():
                rows.append({'section': section, 'name': name, 'value': value})
        elif isinstance(content, list):
            for item in content:
                if not isinstance(item, dict):
                    rows.append({'section': section, 'name': '', 'value': item})
                    continue
                keys = list(item.keys())
                name = item[keys[0]] if keys else ''
                for key in keys[1:]:
                    rows.append({'section': section, 'name': f"{name} / {key}", 'value': item[key]})
        else:
            rows.append({'section': 'summary', 'name': section, 'value': content})
    return rows


def prepare_analytics_export(data_type: str, payload) -> tuple[list[dict], list[dict]]:
    """Return (rows, columns) for a data type's service output."""
    if data_type in ROW_EXPORT_COLUMNS:
        return list(payload), ROW_EXPORT_COLUMNS[data_type]
    return flatten_sections(payload), SECTION_EXPORT_COLUMNS
