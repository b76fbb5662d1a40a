"""
Spreadsheet conversion.

Tabular inputs are loaded into a pandas DataFrame (first sheet only for
workbooks) and written back out in the target format.
"""

import json
from io import BytesIO

import pandas as pd

from ...config import FileType
from ..base_converter import FormatConverter
from .document import html_document

# Subtype -> pandas Excel engine
EXCEL_ENGINES = {
    "xlsx": "openpyxl",
    "xls": "xlrd",
}


def read_table(content: bytes, subtype: str) -> pd.DataFrame:
    """
    Read tabular content into a DataFrame.

    Args:
        content: Raw bytes of the spreadsheet
        subtype: Source subtype ('xlsx', 'xls', 'csv' or 'json')

    Returns:
        pandas DataFrame
    """
    if subtype in EXCEL_ENGINES:
        return pd.read_excel(BytesIO(content), engine=EXCEL_ENGINES[subtype])
    if subtype == "csv":
        return pd.read_csv(BytesIO(content))

    payload = json.loads(content.decode("utf-8"))
    if isinstance(payload, list):
        return pd.json_normalize(payload)
    return pd.DataFrame(payload)


def write_table(df: pd.DataFrame, subtype: str, title: str = "") -> bytes:
    """Serialize a DataFrame as a catalog subtype."""
    if subtype == "csv":
        return df.to_csv(index=False).encode("utf-8")
    if subtype == "json":
        if df.empty:
            return b"[]"
        return df.to_json(orient="records").encode("utf-8")
    if subtype == "html":
        return html_document(df.to_html(index=False, na_rep=""), title).encode("utf-8")

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Sheet1")
    return output.getvalue()


class SpreadsheetConverter(FormatConverter):
    """Converter for workbooks and tabular text formats."""

    file_type = FileType.SPREADSHEET

    def _convert(self, target_subtype: str, content: bytes) -> bytes:
        df = read_table(content, self.subtype)
        df.columns = [str(column).strip() for column in df.columns]
        return write_table(df, target_subtype, self.stem)
