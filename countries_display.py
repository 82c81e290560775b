import os

# Constants
ASYNC_MODE = os.environ.get('ASYNC_MODE', 'eventlet')
SECRET_KEY = os.environ.get('SECRET_KEY', 'your-secret-key-here')

if ASYNC_MODE == 'eventlet':
    import eventlet
    eventlet.monkey_patch()

from flask import Flask, jsonify, render_template, request
from flask_socketio import SocketIO, emit

from country_loader import CountryLoader, LoadTask
from logging_setup import get_logger, setup_logging
from table_display import TableDisplay
from view_state import (ViewSessions, close_country, load_failed, load_succeeded, open_country,
                        set_page, set_rows_per_page, set_search, toggle_sort)

app = Flask(__name__)
app.config['SECRET_KEY'] = SECRET_KEY
socketio = SocketIO(app, cors_allowed_origins="*", async_mode=ASYNC_MODE)

log = get_logger(component='countries_display')

# One view state per connected browser tab
sessions = ViewSessions()
loader = CountryLoader()


def _payload_value(data, key):
    if not isinstance(data, dict) or key not in data:
        raise ValueError(f"Missing '{key}' in event payload")
    return data[key]


def _send_state(sid, state):
    socketio.emit('table_state', TableDisplay(state).get_display(), to=sid)


def _apply(transition, *args):
    """Run a transition for the current client and push the new table back"""
    sid = request.sid
    try:
        state = sessions.update(sid, transition, *args)
    except ValueError as e:
        log.warning('table_event_rejected', sid=sid, transition=transition.__name__, error=str(e))
        emit('table_error', {'message': str(e)})
        return
    if state is not None:
        emit('table_state', TableDisplay(state).get_display())


def start_load(sid, token):
    def on_success(countries):
        state = sessions.update(sid, load_succeeded, countries)
        if state is not None:
            _send_state(sid, state)

    def on_failure(error):
        state = sessions.update(sid, load_failed)
        if state is not None:
            _send_state(sid, state)

    task = LoadTask(loader, token, on_success, on_failure)
    socketio.start_background_task(task.run)
    return task


@app.route('/')
def home():
    return render_template('index.html')


@app.route('/healthz')
def healthz():
    return jsonify({'status': 'ok'})


@socketio.on('connect')
def handle_connect():
    sid = request.sid
    state, token = sessions.add(sid)
    log.info('client_connected', sid=sid)
    # Show the empty loading table right away, rows follow when the fetch lands
    emit('table_state', TableDisplay(state).get_display())
    start_load(sid, token)


@socketio.on('disconnect')
def handle_disconnect():
    sid = request.sid
    sessions.remove(sid)
    log.info('client_disconnected', sid=sid)


@socketio.on('search')
def handle_search(data):
    try:
        text = _payload_value(data, 'text')
    except ValueError as e:
        emit('table_error', {'message': str(e)})
        return
    _apply(set_search, text)


@socketio.on('sort')
def handle_sort(data):
    try:
        column = _payload_value(data, 'column')
    except ValueError as e:
        emit('table_error', {'message': str(e)})
        return
    _apply(toggle_sort, column)


@socketio.on('change_page')
def handle_change_page(data):
    try:
        page = _payload_value(data, 'page')
    except ValueError as e:
        emit('table_error', {'message': str(e)})
        return
    _apply(set_page, page)


@socketio.on('change_rows_per_page')
def handle_change_rows_per_page(data):
    try:
        rows_per_page = _payload_value(data, 'rows_per_page')
    except ValueError as e:
        emit('table_error', {'message': str(e)})
        return
    _apply(set_rows_per_page, rows_per_page)


@socketio.on('open_country')
def handle_open_country(data):
    sid = request.sid
    try:
        name = _payload_value(data, 'name')
        state = sessions.update(sid, open_country, name)
    except ValueError as e:
        emit('table_error', {'message': str(e)})
        return
    except LookupError as e:
        log.warning('country_not_found', sid=sid, error=str(e))
        emit('table_error', {'message': str(e)})
        return
    if state is not None:
        emit('table_state', TableDisplay(state).get_display())


@socketio.on('close_country')
def handle_close_country(data=None):
    _apply(close_country)


def main():
    port = int(os.environ.get('PORT', 5000))
    if os.environ.get('RENDER'):  # Check if we're on Render
        setup_logging()
        socketio.run(app,
                     host='0.0.0.0',
                     port=port,
                     debug=False,
                     use_reloader=False)
    else:
        # Readable lines locally unless LOG_FORMAT says otherwise
        setup_logging(log_format=os.environ.get('LOG_FORMAT', 'console'))
        socketio.run(app,
                     host='127.0.0.1',
                     port=port,
                     debug=True)


if __name__ == '__main__':
    main()
