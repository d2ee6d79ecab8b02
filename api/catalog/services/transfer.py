"""JSON import and export of the application catalog.

Import accepts a JSON array of application-like records (or a single
object). Each record is created on its own: a record that fails
validation or is rejected by the store is logged and skipped while the
rest continue. A payload that is not valid JSON aborts the whole import.
"""
import json
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from catalog.core.time import utc_today
from catalog.schemas.application import Application, ApplicationCreate
from catalog.schemas.search import ImportFailure, ImportResult
from catalog.services.application_gateway import ApplicationGateway, GatewayError

logger = logging.getLogger(__name__)

IMPORT_FIELDS = (
    "appCode",
    "name",
    "description",
    "functionalDomains",
    "technicalStack",
    "status",
    "relatedApps",
    "stakeholders",
)


class ImportFormatError(ValueError):
    """The import payload as a whole is unusable."""


def parse_import_payload(raw: Union[str, bytes]) -> List[Dict[str, Any]]:
    """Decode an import file into a list of records."""
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ImportFormatError("Import file is not valid JSON") from exc

    records = data if isinstance(data, list) else [data]
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ImportFormatError(f"Import record {index} is not a JSON object")
    return records


def record_to_create(record: Dict[str, Any]) -> ApplicationCreate:
    """Pick the known fields out of a record; ids and timestamps are ignored."""
    fields = {key: record[key] for key in IMPORT_FIELDS if key in record}
    return ApplicationCreate.model_validate(fields)


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}"
            for err in exc.errors()
        )
    return str(exc)


def import_applications(gateway: ApplicationGateway, records: Iterable[Dict[str, Any]]) -> ImportResult:
    """Create each record independently and report what was created and skipped."""
    result = ImportResult()
    for record in records:
        app_code: Optional[str] = record.get("appCode") if isinstance(record.get("appCode"), str) else None
        try:
            created = gateway.create_application(record_to_create(record))
        except (ValidationError, GatewayError) as exc:
            logger.warning("Error importing application %s: %s", app_code, _describe(exc))
            result.failed.append(ImportFailure(app_code=app_code, error=_describe(exc)))
            continue
        result.created.append(created)

    logger.info(
        "Imported %d application(s), skipped %d",
        len(result.created), len(result.failed)
    )
    return result


def export_record(app: Application) -> Dict[str, Any]:
    """Application as exported: stakeholder map flattened to role/name pairs."""
    record = app.model_dump(mode="json", by_alias=True)
    record["stakeholders"] = [
        {"role": role, "name": name}
        for role, name in app.stakeholders.by_role().items()
    ]
    return record


def export_applications(applications: Iterable[Application]) -> List[Dict[str, Any]]:
    return [export_record(app) for app in applications]


def export_filename(day: Optional[date] = None) -> str:
    day = day or utc_today()
    return f"applications-{day.isoformat()}.json"


def dumps_export(applications: Iterable[Application]) -> str:
    return json.dumps(export_applications(applications), indent=2)
