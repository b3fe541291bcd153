"""
Exportación a CSV

Arma el contenido CSV a partir de una lista de diccionarios. Las columnas se
indican con un mapeo campo -> encabezado; los campos anidados se leen con
rutas con punto (`user.name`).
"""

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping

from payto.common.filters import field_value


def format_csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Sí" if value else "No"
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def build_csv(rows: List[Mapping[str, Any]], headers: Dict[str, str]) -> str:
    """Contenido CSV con una fila de encabezados y una fila por registro"""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(list(headers.values()))
    for row in rows:
        writer.writerow([format_csv_value(field_value(row, field)) for field in headers])
    content = output.getvalue()
    output.close()
    return content
