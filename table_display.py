from query_engine import SORT_KEYS, visible_rows
from view_state import ROWS_PER_PAGE_OPTIONS

# Constants
NO_RECORDS_TEXT = "No records found."
LOAD_FAILED_TEXT = "Country data could not be loaded."
FLAG_PLACEHOLDER = "N/A"

COLUMNS = [
    ('flag', 'Flag'),
    ('name', 'Country Name'),
    ('cca2', 'Country Code'),
    ('cca3', 'Country Code'),
    ('nativeName', 'Native Country Names'),
    ('altSpellings', 'Alternative Country Name'),
    ('idd', 'Calling Country Code'),
]


class TableDisplay:
    def __init__(self, view_state):
        self.view_state = view_state

    def get_columns(self):
        state = self.view_state
        return [
            {
                'id': column_id,
                'label': label,
                'sortable': column_id in SORT_KEYS,
                'active': column_id == state.sort_column,
                'direction': state.sort_order if column_id == state.sort_column else None
            }
            for column_id, label in COLUMNS
        ]

    def get_detail(self):
        """Overlay contents, projected from the selected record only"""
        state = self.view_state
        if not state.modal_open or state.selected_country is None:
            return None
        country = state.selected_country
        return {
            'flag': country.flag_png or None,
            'name': country.official_name,
            'cca2': country.cca2,
            'cca3': country.cca3,
            'nativeName': country.native_names() or '',
            'altSpellings': country.alt_spellings_text(),
            'idd': country.idd_root
        }

    def get_display(self):
        state = self.view_state
        result = visible_rows(state)
        # The placeholder follows the filtered count; a page past the end is just empty
        placeholder = NO_RECORDS_TEXT if result.total == 0 else None
        return {
            'columns': self.get_columns(),
            'rows': [country.to_dict() for country in result.rows],
            'placeholder': placeholder,
            'colspan': len(COLUMNS),
            'flag_placeholder': FLAG_PLACEHOLDER,
            'search': state.search,
            'pagination': {
                'page': state.page,
                'rows_per_page': state.rows_per_page,
                'count': result.total,
                'options': list(ROWS_PER_PAGE_OPTIONS)
            },
            'status': state.load_status,
            'status_message': LOAD_FAILED_TEXT if state.load_status == 'failed' else None,
            'detail': self.get_detail()
        }
