import threading
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from country import Country
from country_loader import CancelToken
from query_engine import sort_countries, toggle_order

# Constants
DEFAULT_ROWS_PER_PAGE = 25
ROWS_PER_PAGE_OPTIONS = (10, 25, 100)
LOAD_STATUSES = ('loading', 'loaded', 'failed')


@dataclass(frozen=True)
class ViewState:
    """Everything one client's table shows, replaced as a whole on every change."""
    countries: Tuple[Country, ...] = ()
    page: int = 0
    rows_per_page: int = DEFAULT_ROWS_PER_PAGE
    search: str = ''
    sort_column: str = 'name'
    sort_order: str = 'asc'
    selected_country: Optional[Country] = None
    modal_open: bool = False
    load_status: str = 'loading'

    def to_dict(self, include_countries=False):
        data = {
            'page': self.page,
            'rows_per_page': self.rows_per_page,
            'search': self.search,
            'sort_column': self.sort_column,
            'sort_order': self.sort_order,
            'selected_country': self.selected_country.official_name if self.selected_country else None,
            'modal_open': self.modal_open,
            'load_status': self.load_status,
            'count': len(self.countries)
        }
        if include_countries:
            data['countries'] = [c.raw for c in self.countries]
        return data


# Transitions. Each takes a state and returns a new one; invalid input raises ValueError.

def load_succeeded(state, countries):
    # Keep the active sort so the header indicator matches the rows
    ordered = sort_countries(countries, state.sort_column, state.sort_order)
    return replace(state, countries=tuple(ordered), load_status='loaded')


def load_failed(state):
    return replace(state, load_status='failed')


def set_search(state, text):
    if not isinstance(text, str):
        raise ValueError("Search text must be a string")
    return replace(state, search=text, page=0)


def set_page(state, page):
    if not isinstance(page, int) or isinstance(page, bool) or page < 0:
        raise ValueError(f"Page must be a non-negative integer, got {page!r}")
    return replace(state, page=page)


def set_rows_per_page(state, rows_per_page):
    # 25.0 == 25, so the type check has to come first
    if type(rows_per_page) is not int or rows_per_page not in ROWS_PER_PAGE_OPTIONS:
        raise ValueError(f"Rows per page must be one of {ROWS_PER_PAGE_OPTIONS}, got {rows_per_page!r}")
    return replace(state, rows_per_page=rows_per_page, page=0)


def toggle_sort(state, column):
    order = toggle_order(state.sort_column, state.sort_order, column)
    ordered = sort_countries(state.countries, column, order)
    return replace(state, countries=tuple(ordered), sort_column=column, sort_order=order)


def open_country(state, official_name):
    for country in state.countries:
        if country.official_name == official_name:
            return replace(state, selected_country=country, modal_open=True)
    raise LookupError(f"No country named {official_name!r}")


def close_country(state):
    return replace(state, selected_country=None, modal_open=False)


class ViewSessions:
    """View state and load token for every connected client, keyed by socket id"""

    def __init__(self):
        self.states = {}
        self.tokens = {}
        self._lock = threading.Lock()

    def add(self, sid):
        with self._lock:
            self.states[sid] = ViewState()
            self.tokens[sid] = CancelToken()
            return self.states[sid], self.tokens[sid]

    def get(self, sid):
        return self.states.get(sid)

    def update(self, sid, transition, *args):
        """Apply a transition to a client's state. Returns None for unknown clients."""
        with self._lock:
            state = self.states.get(sid)
            if state is None:
                return None
            new_state = transition(state, *args)
            self.states[sid] = new_state
            return new_state

    def remove(self, sid):
        with self._lock:
            token = self.tokens.pop(sid, None)
            if token:
                token.cancel()
            self.states.pop(sid, None)
