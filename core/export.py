import csv
import io
from decimal import Decimal
from typing import Iterable, List

from fastapi.responses import StreamingResponse

from core.helper import get_current_time_in_timezone
from models.Participant import Participant
from models.Reference import Reference

REFERENCE_HEADERS = [
    "Reference",
    "Tickets",
    "Ticket Value",
    "Total Value",
    "Used",
    "Used At",
    "Created At",
]
PARTICIPANT_HEADERS = [
    "Name",
    "Email",
    "Phone",
    "National ID",
    "Reference",
    "Tickets",
    "Generated At",
]


def _format_date(value) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def reference_rows(references: Iterable[Reference]) -> List[list]:
    rows = []
    for reference in references:
        value = reference.ticket_value or Decimal("0")
        rows.append(
            [
                reference.code,
                reference.ticket_count,
                f"{value:.2f}",
                f"{value * reference.ticket_count:.2f}",
                "Yes" if reference.used else "No",
                _format_date(reference.used_at),
                _format_date(reference.created_at),
            ]
        )
    return rows


def participant_rows(participants: Iterable[Participant]) -> List[list]:
    return [
        [
            p.name,
            p.email,
            p.phone,
            p.national_id,
            p.reference_code or "",
            "; ".join(p.tickets or []),
            p.generated_at.strftime("%Y-%m-%d %H:%M:%S") if p.generated_at else "",
        ]
        for p in participants
    ]


def csv_response(prefix: str, headers: List[str], rows: List[list]) -> StreamingResponse:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow(headers)
    writer.writerows(rows)
    output.seek(0)

    filename = f"{prefix}-{get_current_time_in_timezone().strftime('%Y-%m-%d')}.csv"
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
