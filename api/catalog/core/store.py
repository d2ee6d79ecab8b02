"""Application state store.

A single state object changed only through the named transitions in
``ActionType``. Each transition is a pure ``(state, payload) -> state``
function; the ``Store`` holds the current state and notifies
subscribers after every dispatch. Nothing derived (filtered lists,
counts) is kept in state.
"""
import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from catalog.core.config import settings
from catalog.schemas.application import Application
from catalog.schemas.search import FilterState
from catalog.schemas.user import User


class ActionType(str, enum.Enum):
    SET_USER = "SET_USER"
    SET_APPLICATIONS = "SET_APPLICATIONS"
    ADD_APPLICATION = "ADD_APPLICATION"
    UPDATE_APPLICATION = "UPDATE_APPLICATION"
    DELETE_APPLICATION = "DELETE_APPLICATION"
    SET_FILTERS = "SET_FILTERS"
    SET_SEARCH_QUERY = "SET_SEARCH_QUERY"
    ADD_SEARCH_HISTORY = "ADD_SEARCH_HISTORY"
    CLEAR_SEARCH_HISTORY = "CLEAR_SEARCH_HISTORY"
    TOGGLE_DARK_MODE = "TOGGLE_DARK_MODE"
    SET_SELECTED_APP = "SET_SELECTED_APP"
    SET_LOADING = "SET_LOADING"


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Any = None


class AppState(BaseModel):
    """Session-wide catalog state. Immutable; transitions return copies."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    user: Optional[User] = None
    applications: List[Application] = Field(default_factory=list)
    filters: FilterState = Field(default_factory=FilterState)
    search_query: str = ""
    search_history: List[str] = Field(default_factory=list)
    dark_mode: bool = False
    selected_app: Optional[Application] = None
    is_loading: bool = False


def initial_state() -> AppState:
    return AppState()


def _add_search_history(history: List[str], entry: str, limit: int) -> List[str]:
    return [entry, *[h for h in history if h != entry]][:limit]


def app_reducer(state: AppState, action: Action) -> AppState:
    """Apply one transition. Unknown action types leave state unchanged."""
    kind = action.type
    payload = action.payload

    if kind == ActionType.SET_USER:
        return state.model_copy(update={"user": payload})
    if kind == ActionType.SET_APPLICATIONS:
        return state.model_copy(update={"applications": list(payload)})
    if kind == ActionType.ADD_APPLICATION:
        return state.model_copy(update={"applications": [*state.applications, payload]})
    if kind == ActionType.UPDATE_APPLICATION:
        return state.model_copy(update={
            "applications": [payload if app.id == payload.id else app for app in state.applications]
        })
    if kind == ActionType.DELETE_APPLICATION:
        return state.model_copy(update={
            "applications": [app for app in state.applications if app.id != payload]
        })
    if kind == ActionType.SET_FILTERS:
        return state.model_copy(update={"filters": payload})
    if kind == ActionType.SET_SEARCH_QUERY:
        return state.model_copy(update={"search_query": payload})
    if kind == ActionType.ADD_SEARCH_HISTORY:
        return state.model_copy(update={
            "search_history": _add_search_history(
                state.search_history, payload, settings.SEARCH_HISTORY_LIMIT
            )
        })
    if kind == ActionType.CLEAR_SEARCH_HISTORY:
        return state.model_copy(update={"search_history": []})
    if kind == ActionType.TOGGLE_DARK_MODE:
        return state.model_copy(update={"dark_mode": not state.dark_mode})
    if kind == ActionType.SET_SELECTED_APP:
        return state.model_copy(update={"selected_app": payload})
    if kind == ActionType.SET_LOADING:
        return state.model_copy(update={"is_loading": bool(payload)})

    return state


Listener = Callable[[AppState, AppState], None]


class Store:
    """Holds the current ``AppState``; the only way to change it is ``dispatch``."""

    def __init__(self, state: Optional[AppState] = None, reducer=app_reducer):
        self._state = state if state is not None else initial_state()
        self._reducer = reducer
        self._listeners: Dict[int, Listener] = {}
        self._next_listener_id = 0

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        old_state = self._state
        new_state = self._reducer(old_state, action)
        if new_state is old_state:
            return new_state

        self._state = new_state
        for listener in list(self._listeners.values()):
            listener(new_state, old_state)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(new_state, old_state)``; returns an unsubscribe callable."""
        listener_id = self._next_listener_id
        self._next_listener_id += 1
        self._listeners[listener_id] = listener

        def unsubscribe() -> None:
            self._listeners.pop(listener_id, None)

        return unsubscribe


# Action constructors
def set_user(user: Optional[User]) -> Action:
    return Action(ActionType.SET_USER, user)


def set_applications(applications: List[Application]) -> Action:
    return Action(ActionType.SET_APPLICATIONS, applications)


def add_application(application: Application) -> Action:
    return Action(ActionType.ADD_APPLICATION, application)


def update_application(application: Application) -> Action:
    return Action(ActionType.UPDATE_APPLICATION, application)


def delete_application(application_id: int) -> Action:
    return Action(ActionType.DELETE_APPLICATION, application_id)


def set_filters(filters: FilterState) -> Action:
    return Action(ActionType.SET_FILTERS, filters)


def set_search_query(query: str) -> Action:
    return Action(ActionType.SET_SEARCH_QUERY, query)


def add_search_history(query: str) -> Action:
    return Action(ActionType.ADD_SEARCH_HISTORY, query)


def clear_search_history() -> Action:
    return Action(ActionType.CLEAR_SEARCH_HISTORY)


def toggle_dark_mode() -> Action:
    return Action(ActionType.TOGGLE_DARK_MODE)


def set_selected_app(application: Optional[Application]) -> Action:
    return Action(ActionType.SET_SELECTED_APP, application)


def set_loading(is_loading: bool) -> Action:
    return Action(ActionType.SET_LOADING, is_loading)
