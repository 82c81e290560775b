import difflib
import unicodedata
from collections import namedtuple

# Constants
SEARCH_THRESHOLD = 0.3  # 0 = exact, 1 = no match
FUZZY_DISTANCE = 100  # Characters from the start of the name at which a match costs 1.0
SORT_ORDERS = ('asc', 'desc')

SORT_KEYS = {
    'name': lambda c: c.official_name,
    'cca2': lambda c: c.cca2,
    'cca3': lambda c: c.cca3,
    'nativeName': lambda c: c.native_names() or '',
    'altSpellings': lambda c: c.alt_spellings_text(),
    'idd': lambda c: c.idd_root,
}

# total is the filtered count, before the page window
QueryResult = namedtuple('QueryResult', ['rows', 'total'])


def _norm(s):
    s = (s or '').strip()
    s = unicodedata.normalize('NFKD', s)
    s = ''.join(ch for ch in s if not unicodedata.combining(ch))
    return s.casefold()


def match_score(text, name):
    """
    Score how well `text` matches somewhere inside `name`.

    The best window of `name` the size of the query is compared with
    SequenceMatcher; the mismatch plus a penalty for how far into the name the
    window starts gives a score between 0 (exact, at the start) and 1.
    """
    query = _norm(text)
    target = _norm(name)
    if not query:
        return 0.0

    position = target.find(query)
    if position >= 0:
        return min(position / FUZZY_DISTANCE, 1.0)

    size = len(query)
    if len(target) <= size:
        windows = [(0, target)]
    else:
        windows = [(i, target[i:i + size]) for i in range(len(target) - size + 1)]

    best = 1.0
    matcher = difflib.SequenceMatcher(None, autojunk=False)
    matcher.set_seq2(query)
    for start, window in windows:
        matcher.set_seq1(window)
        score = (1.0 - matcher.ratio()) + start / FUZZY_DISTANCE
        if score < best:
            best = score
    return best


def search(countries, text, threshold=SEARCH_THRESHOLD):
    """Fuzzy filter on the official name, best match first"""
    if not text or not text.strip():
        return list(countries)

    scored = []
    for country in countries:
        score = match_score(text, country.official_name)
        if score <= threshold:
            scored.append((score, country))
    # Stable: equal scores keep canonical order
    scored.sort(key=lambda pair: pair[0])
    return [country for _, country in scored]


def sort_countries(countries, column='name', order='asc'):
    if not isinstance(column, str) or column not in SORT_KEYS:
        raise ValueError(f"Column {column!r} is not sortable")
    if order not in SORT_ORDERS:
        raise ValueError(f"Sort order must be one of {SORT_ORDERS}, got {order!r}")

    key = SORT_KEYS[column]
    result = sorted(countries, key=lambda c: (_norm(key(c)), key(c)))
    if order == 'desc':
        result.reverse()
    return result


def toggle_order(current_column, current_order, column):
    # Same column flips, a fresh column starts ascending
    if column == current_column and current_order == 'asc':
        return 'desc'
    return 'asc'


def paginate(rows, page, rows_per_page):
    if page < 0:
        raise ValueError(f"Page must be >= 0, got {page}")
    if rows_per_page <= 0:
        raise ValueError(f"Rows per page must be > 0, got {rows_per_page}")
    start = page * rows_per_page
    # Past the end is an empty page, not a clamped one
    return list(rows[start:start + rows_per_page])


def visible_rows(state, threshold=SEARCH_THRESHOLD):
    filtered = search(state.countries, state.search, threshold)
    return QueryResult(
        rows=paginate(filtered, state.page, state.rows_per_page),
        total=len(filtered)
    )
