"""Async controller tying the state store to the data gateway.

One ``CatalogSession`` per signed-in client. State changes happen on
the event loop through ``Store.dispatch``; gateway calls run in worker
threads, so several may be in flight at once. List and search responses
carry a sequence token and only the newest one is committed. Mutations
are dispatched only after the gateway succeeded.
"""
import asyncio
import logging
from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, List, Optional, Tuple, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from catalog.core.concurrency import Debouncer, RequestSequencer
from catalog.core.preferences import (
    PreferenceStorage,
    bind_preferences,
    restore_preferences,
)
from catalog.core.search import get_search_suggestions, visible_applications
from catalog.core.store import (
    AppState,
    Store,
    add_application,
    add_search_history,
    clear_search_history,
    delete_application,
    set_applications,
    set_filters,
    set_loading,
    set_search_query,
    set_selected_app,
    set_user,
    toggle_dark_mode,
    update_application,
)
from catalog.schemas.application import Application, ApplicationCreate, ApplicationUpdate
from catalog.schemas.search import FilterState, ImportResult
from catalog.schemas.user import User
from catalog.services.application_gateway import ApplicationGateway
from catalog.services.auth_service import AuthEvents, AuthService
from catalog.services.transfer import (
    dumps_export,
    export_filename,
    import_applications,
    parse_import_payload,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
GatewayFactory = Callable[[], ContextManager[ApplicationGateway]]

APPLICATIONS_CHANNEL = "applications"
LOADING_CHANNEL = "loading"


def _toggle(values: List[str], value: str) -> List[str]:
    return [v for v in values if v != value] if value in values else [*values, value]


class CatalogSession:

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        store: Optional[Store] = None,
        storage: Optional[PreferenceStorage] = None,
        gateway_factory: Optional[GatewayFactory] = None,
        debouncer: Optional[Debouncer] = None,
        sequencer: Optional[RequestSequencer] = None,
        auth_events: Optional[AuthEvents] = None,
    ):
        if session_factory is None and gateway_factory is None:
            from catalog.core.database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory
        self._gateway_factory = gateway_factory or self._session_gateway
        self.store = store or Store()
        self.storage = storage if storage is not None else PreferenceStorage()
        self.debouncer = debouncer or Debouncer()
        self.sequencer = sequencer or RequestSequencer()
        self.auth_events = auth_events or AuthEvents()
        self.suggestions: List[str] = []
        self._preferences_bound = False
        self._unsubscribers = [
            self.auth_events.subscribe(lambda user: self.store.dispatch(set_user(user)))
        ]

    @property
    def state(self) -> AppState:
        return self.store.state

    @contextmanager
    def _session_gateway(self) -> Iterator[ApplicationGateway]:
        db: Session = self._session_factory()
        try:
            yield ApplicationGateway(db)
        finally:
            db.close()

    def _with_gateway(self, operation: Callable[[ApplicationGateway], T]) -> T:
        with self._gateway_factory() as gateway:
            return operation(gateway)

    async def _gateway_call(self, operation: Callable[[ApplicationGateway], T]) -> T:
        return await asyncio.to_thread(self._with_gateway, operation)

    def _with_auth(self, operation: Callable[[AuthService], T]) -> T:
        if self._session_factory is None:
            raise RuntimeError("Authentication needs a database session factory")
        db: Session = self._session_factory()
        try:
            return operation(AuthService(db))
        finally:
            db.close()

    def _restore_preferences(self) -> None:
        if self._preferences_bound:
            return
        restore_preferences(self.store, self.storage)
        self._unsubscribers.append(bind_preferences(self.store, self.storage))
        self._preferences_bound = True

    # -- loading and searching -------------------------------------------

    async def load(self, token: Optional[str] = None) -> AppState:
        """Startup: current user, full application list, stored preferences."""
        self._restore_preferences()
        loading_token = self._start_loading()
        try:
            if token:
                user = await asyncio.to_thread(
                    self._with_auth, lambda auth: auth.get_current_user(token)
                )
                if user:
                    self.store.dispatch(set_user(user))
            await self._fetch_applications(query=None)
        finally:
            self._finish_loading(loading_token)
        return self.state

    def _start_loading(self) -> int:
        self.store.dispatch(set_loading(True))
        return self.sequencer.next_token(LOADING_CHANNEL)

    def _finish_loading(self, token: int) -> None:
        # An overlapping newer load owns the flag until it finishes
        if self.sequencer.is_current(token, LOADING_CHANNEL):
            self.store.dispatch(set_loading(False))

    async def refresh(self) -> List[Application]:
        return await self._fetch_applications(query=None)

    async def _fetch_applications(self, query: Optional[str]) -> List[Application]:
        request_token = self.sequencer.next_token(APPLICATIONS_CHANNEL)
        if query is None:
            results = await self._gateway_call(lambda gw: gw.list_applications())
        else:
            results = await self._gateway_call(lambda gw: gw.search_applications(query))

        if self.sequencer.is_current(request_token, APPLICATIONS_CHANNEL):
            self.store.dispatch(set_applications(results))
            if query is not None:
                self.store.dispatch(set_search_query(query))
        else:
            logger.debug("Discarding stale application response %s", request_token)
        return results

    async def search_remote(self, query: str) -> List[Application]:
        """Server-side search; commits results only if no newer request started."""
        loading_token = self._start_loading()
        try:
            return await self._fetch_applications(query=query)
        finally:
            self._finish_loading(loading_token)

    def type_query(self, text: str) -> asyncio.Task:
        """Debounced keystroke handling: update the query and suggestions once typing pauses."""
        return self.debouncer.trigger(self._apply_query, text)

    def _apply_query(self, text: str) -> List[str]:
        self.store.dispatch(set_search_query(text))
        self.suggestions = get_search_suggestions(self.state.applications, text) if text.strip() else []
        return self.suggestions

    async def submit_search(self, text: str) -> List[Application]:
        """Record the query in history and run the server-side search."""
        self.debouncer.cancel()
        self.suggestions = []
        query = text.strip()
        if not query:
            self.store.dispatch(set_search_query(""))
            return self.visible_applications()
        self.store.dispatch(add_search_history(query))
        return await self.search_remote(query)

    def visible_applications(self) -> List[Application]:
        return visible_applications(self.state)

    # -- UI state ----------------------------------------------------------

    def set_filters(self, filters: FilterState) -> None:
        self.store.dispatch(set_filters(filters))

    def toggle_domain(self, domain: str) -> None:
        filters = self.state.filters
        self.set_filters(filters.model_copy(update={"domains": _toggle(filters.domains, domain)}))

    def toggle_status(self, status: str) -> None:
        filters = self.state.filters
        self.set_filters(filters.model_copy(update={"statuses": _toggle(filters.statuses, status)}))

    def clear_filters(self) -> None:
        self.set_filters(FilterState())

    def select_application(self, application: Optional[Application]) -> None:
        self.store.dispatch(set_selected_app(application))

    def toggle_dark_mode(self) -> None:
        self.store.dispatch(toggle_dark_mode())

    def clear_search_history(self) -> None:
        self.store.dispatch(clear_search_history())

    # -- mutations ---------------------------------------------------------

    async def create_application(self, data: ApplicationCreate) -> Application:
        created = await self._gateway_call(lambda gw: gw.create_application(data))
        self.store.dispatch(add_application(created))
        return created

    async def update_application(self, application_id: int, data: ApplicationUpdate) -> Optional[Application]:
        updated = await self._gateway_call(lambda gw: gw.update_application(application_id, data))
        if updated is None:
            return None
        self.store.dispatch(update_application(updated))
        selected = self.state.selected_app
        if selected is not None and selected.id == updated.id:
            self.store.dispatch(set_selected_app(updated))
        return updated

    async def delete_application(self, application_id: int) -> bool:
        deleted = await self._gateway_call(lambda gw: gw.delete_application(application_id))
        if deleted:
            self.store.dispatch(delete_application(application_id))
            selected = self.state.selected_app
            if selected is not None and selected.id == application_id:
                self.store.dispatch(set_selected_app(None))
        return deleted

    async def import_file(self, raw: str) -> ImportResult:
        """Import records then reload the catalog. Bad JSON aborts before any write."""
        records = parse_import_payload(raw)
        result = await self._gateway_call(lambda gw: import_applications(gw, records))
        await self.refresh()
        return result

    def export(self) -> Tuple[str, str]:
        """(file name, JSON text) for the applications currently loaded."""
        return export_filename(), dumps_export(self.state.applications)

    # -- authentication ----------------------------------------------------

    async def sign_in(self, email: str, password: str) -> Tuple[User, str]:
        user, token = await asyncio.to_thread(
            self._with_auth, lambda auth: auth.sign_in(email, password)
        )
        self.auth_events.emit(user)
        return user, token

    def sign_out(self) -> None:
        self.auth_events.emit(None)

    def close(self) -> None:
        self.debouncer.cancel()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._preferences_bound = False
