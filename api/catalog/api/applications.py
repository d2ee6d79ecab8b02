"""Application catalog routes."""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from catalog.core.constants import (
    DEPARTMENTS,
    FUNCTIONAL_DOMAINS,
    STAKEHOLDER_ROLES,
    STATUS_OPTIONS,
    TECHNICAL_STACKS,
)
from catalog.core.database import get_db
from catalog.core.deps import get_current_user, require_admin
from catalog.core.search import (
    filter_applications,
    generate_app_code,
    get_search_suggestions,
    summarize_applications,
)
from catalog.models.user import User
from catalog.schemas.application import (
    Application,
    ApplicationCreate,
    ApplicationUpdate,
    CatalogStats,
    NextAppCode,
    ReferenceData,
    RelatedApplication,
)
from catalog.schemas.search import BrowseResult, FilterState, ImportResult, SuggestionResult
from catalog.services.application_gateway import (
    ApplicationGateway,
    DuplicateAppCodeError,
    GatewayError,
)
from catalog.services.transfer import (
    ImportFormatError,
    dumps_export,
    export_filename,
    import_applications,
    parse_import_payload,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_gateway(db: Session = Depends(get_db)) -> ApplicationGateway:
    return ApplicationGateway(db)


def service_unavailable(exc: GatewayError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


def load_all(gateway: ApplicationGateway) -> List[Application]:
    try:
        return gateway.list_applications()
    except GatewayError as exc:
        raise service_unavailable(exc)


@router.get("/", response_model=List[Application])
def list_applications(
    search: Optional[str] = None,
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(get_current_user)
):
    """List applications, most recently updated first.

    With ``search`` the database does the matching (name, description
    and app code, case-insensitive).
    """
    if search is None:
        return load_all(gateway)
    try:
        return gateway.search_applications(search)
    except GatewayError as exc:
        raise service_unavailable(exc)


@router.get("/browse", response_model=BrowseResult)
def browse_applications(
    q: str = "",
    domains: List[str] = Query(default=[]),
    statuses: List[str] = Query(default=[]),
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(get_current_user)
):
    """Fuzzy search plus domain/status filters over the whole catalog."""
    filters = FilterState(domains=domains, statuses=statuses)
    items = filter_applications(load_all(gateway), q, filters)
    return BrowseResult(query=q, filters=filters, total=len(items), items=items)


@router.get("/suggestions", response_model=SuggestionResult)
def search_suggestions(
    q: str = "",
    limit: Optional[int] = Query(default=None, ge=1, le=50),
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(get_current_user)
):
    if not q.strip():
        return SuggestionResult(query=q, suggestions=[])
    suggestions = get_search_suggestions(load_all(gateway), q, limit)
    return SuggestionResult(query=q, suggestions=suggestions)


@router.get("/stats", response_model=CatalogStats)
def catalog_stats(
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(get_current_user)
):
    """Dashboard counts."""
    return summarize_applications(load_all(gateway))


@router.get("/next-code", response_model=NextAppCode)
def next_app_code(
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(require_admin)
):
    """Suggest an unused app code for the create form."""
    try:
        existing = gateway.existing_app_codes()
    except GatewayError as exc:
        raise service_unavailable(exc)
    return NextAppCode(app_code=generate_app_code(existing))


@router.get("/reference", response_model=ReferenceData)
def reference_data(current_user: User = Depends(get_current_user)):
    """Option lists for the application and stakeholder forms."""
    return ReferenceData(
        functional_domains=FUNCTIONAL_DOMAINS,
        technical_stacks=TECHNICAL_STACKS,
        statuses=STATUS_OPTIONS,
        stakeholder_roles=STAKEHOLDER_ROLES,
        departments=DEPARTMENTS,
    )


@router.get("/export")
def export_applications(
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(get_current_user)
):
    """Download the catalog as a JSON file."""
    body = dumps_export(load_all(gateway))
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.post("/import", response_model=ImportResult)
async def import_file(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Import a JSON export. Records are created one by one; bad ones are skipped."""
    raw = await request.body()
    try:
        records = parse_import_payload(raw)
    except ImportFormatError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    result = import_applications(ApplicationGateway(db), records)
    logger.info("User %s imported %d application(s)", current_user.email, result.created_count)
    return result


@router.get("/{application_id}", response_model=Application)
def get_application(
    application_id: int,
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(get_current_user)
):
    try:
        application = gateway.get_application(application_id)
    except GatewayError as exc:
        raise service_unavailable(exc)
    if application is None:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


@router.get("/{application_id}/related", response_model=List[RelatedApplication])
def related_applications(
    application_id: int,
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(get_current_user)
):
    """Resolve related app codes. Codes with no matching application come back unresolved."""
    try:
        application = gateway.get_application(application_id)
        if application is None:
            raise HTTPException(status_code=404, detail="Application not found")
        related = application.related_apps
        resolved = gateway.get_by_codes(related.functional + related.technical)
    except GatewayError as exc:
        raise service_unavailable(exc)

    return [
        RelatedApplication(app_code=code, relationship_type=kind, application=resolved.get(code.upper()))
        for kind, codes in (("functional", related.functional), ("technical", related.technical))
        for code in codes
    ]


@router.post("/", response_model=Application, status_code=201)
def create_application(
    application_data: ApplicationCreate,
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(require_admin)
):
    """Create a new application (Admin only)."""
    try:
        return gateway.create_application(application_data)
    except DuplicateAppCodeError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except GatewayError as exc:
        raise service_unavailable(exc)


@router.put("/{application_id}", response_model=Application)
def update_application(
    application_id: int,
    application_data: ApplicationUpdate,
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(require_admin)
):
    """Replace an application's fields (Admin only)."""
    try:
        application = gateway.update_application(application_id, application_data)
    except DuplicateAppCodeError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except GatewayError as exc:
        raise service_unavailable(exc)
    if application is None:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


@router.delete("/{application_id}", status_code=204)
def delete_application(
    application_id: int,
    gateway: ApplicationGateway = Depends(get_gateway),
    current_user: User = Depends(require_admin)
):
    """Delete an application and its stakeholder and relationship rows (Admin only)."""
    try:
        deleted = gateway.delete_application(application_id)
    except GatewayError as exc:
        raise service_unavailable(exc)
    if not deleted:
        raise HTTPException(status_code=404, detail="Application not found")
    return None
