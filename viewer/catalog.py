from flask import Blueprint, jsonify, request, current_app
from collections import OrderedDict
import logging
import secrets
import threading

from services.errors import NetworkError, FetchExhaustedError
from services.loader import ScrollHooks, ScrollState
from services.models import display_name
from services.session import GenerationCounter

bp = Blueprint('catalog', __name__)

# In-memory viewer store: token -> Viewer (scroll controller + generation counter).
# Oldest viewers are evicted past MAX_VIEWERS; completed ones are dropped right away.
VIEWERS = OrderedDict()
MAX_VIEWERS = 512
_VIEWERS_LOCK = threading.Lock()


def _log_debug(message: str, **fields):
    """Best-effort debug logger that prefers Flask's app logger.
    Falls back to the module logger outside an application context.
    """
    text = f"[CATALOG] {message} | {fields}" if fields else f"[CATALOG] {message}"
    try:
        current_app.logger.debug(text)
    except RuntimeError:
        logging.getLogger(__name__).debug(text)


def _session():
    return current_app.extensions['catalog']


def _int_arg(name, default, minimum=0):
    try:
        value = int(request.args.get(name, default))
    except (TypeError, ValueError):
        value = default
    return max(value, minimum)


class _CardCollector(ScrollHooks):
    """Collects rendered cards and presentation events for one HTTP response."""

    def __init__(self):
        self.cards = []
        self.events = []

    def render(self, entry, record):
        card = record.to_card()
        card['name'] = entry.name
        card['display_name'] = display_name(entry.name)
        self.cards.append(card)

    def drain(self):
        cards, self.cards = self.cards, []
        events, self.events = self.events, []
        return cards, events

    def show_indicator(self):
        self.events.append('show_indicator')

    def hide_indicator(self):
        self.events.append('hide_indicator')

    def arm_trigger(self):
        self.events.append('arm_trigger')

    def teardown_trigger(self):
        self.events.append('teardown_trigger')

    def show_retry(self):
        self.events.append('show_retry')

    def hide_retry(self):
        self.events.append('hide_retry')


class Viewer:
    def __init__(self):
        self.generations = GenerationCounter()
        self.collector = _CardCollector()
        self.controller = None


def _store_viewer(token, viewer):
    with _VIEWERS_LOCK:
        VIEWERS[token] = viewer
        while len(VIEWERS) > MAX_VIEWERS:
            old_token, _ = VIEWERS.popitem(last=False)
            _log_debug('Evicted viewer', token=old_token)


def _drop_viewer(token):
    with _VIEWERS_LOCK:
        VIEWERS.pop(token, None)


def _viewer_payload(token, viewer, **extra):
    ctl = viewer.controller
    cards, events = viewer.collector.drain()
    payload = {
        'token': token,
        'state': ctl.state.value,
        'cursor': ctl.cursor,
        'total': ctl.total,
        'retry': ctl.retry_visible,
        'events': events,
        'cards': cards,
    }
    payload.update(extra)
    return payload


@bp.route('/api/catalog')
def catalog_index():
    try:
        entries = _session().catalog()
    except NetworkError as e:
        _log_debug('Catalog list failed', error=str(e))
        return jsonify({'error': 'Failed to load Pokémon list. Please try again later.'}), 502
    return jsonify([e.to_json() for e in entries])


@bp.route('/api/catalog/slice')
def catalog_slice():
    session = _session()
    try:
        entries = session.catalog()
    except NetworkError as e:
        _log_debug('Catalog list failed', error=str(e))
        return jsonify({'error': 'Failed to load Pokémon list. Please try again later.'}), 502
    cursor = _int_arg('cursor', 0)
    # fan-out stays bounded by the scroll slice size
    size = min(_int_arg('size', session.settings.scroll_slice, minimum=1),
               session.settings.scroll_slice)
    collector = _CardCollector()
    new_cursor = session.loader.load_next_slice(entries, cursor, size, collector.render)
    _log_debug('Served slice', cursor=cursor, size=size, rendered=len(collector.cards))
    return jsonify({
        'cursor': new_cursor,
        'total': len(entries),
        'complete': new_cursor >= len(entries),
        'cards': collector.cards,
    })


@bp.route('/api/scroll', methods=['POST'])
def scroll_start():
    session = _session()
    viewer = Viewer()
    try:
        viewer.controller = session.scroll_controller(viewer.collector.render,
                                                      hooks=viewer.collector,
                                                      generations=viewer.generations)
    except NetworkError as e:
        _log_debug('Catalog list failed', error=str(e))
        return jsonify({'error': 'Failed to load Pokémon list. Please try again later.'}), 502
    token = secrets.token_urlsafe(16)
    viewer.controller.start()
    if viewer.controller.state is not ScrollState.COMPLETE:
        _store_viewer(token, viewer)
    return jsonify(_viewer_payload(token, viewer))


@bp.route('/api/scroll/<token>/more', methods=['POST'])
def scroll_more(token):
    viewer = VIEWERS.get(token)
    if viewer is None:
        return jsonify({'error': 'Unknown viewer token'}), 404
    trigger = (request.args.get('trigger') or 'sentinel').lower()
    if trigger == 'button':
        ran = viewer.controller.on_load_more()
    else:
        ran = viewer.controller.on_sentinel_visible()
    if viewer.controller.state is ScrollState.COMPLETE:
        _drop_viewer(token)
    return jsonify(_viewer_payload(token, viewer, suppressed=not ran))


@bp.route('/api/search')
def search():
    session = _session()
    q = request.args.get('q') or ''
    viewer = VIEWERS.get(request.args.get('token') or '')
    # Without a viewer the run only competes with itself.
    generations = viewer.generations if viewer is not None else GenerationCounter()
    collector = _CardCollector()
    try:
        outcome = session.search(generations=generations).run(q, collector.render)
    except NetworkError as e:
        _log_debug('Catalog list failed during search', error=str(e), q=q)
        return jsonify({'error': 'Failed to load Pokémon list. Please try again later.'}), 502
    return jsonify({
        'query': q.lower(),
        'generation': outcome.generation,
        'matched': outcome.matched,
        'stale': outcome.stale,
        'cards': collector.cards,
    })


@bp.route('/api/pokemon/<name>')
def pokemon_detail(name):
    session = _session()
    name = name.strip().lower()
    try:
        record = session.details.resolve_full_detail(name)
    except FetchExhaustedError as e:
        _log_debug('Detail failed', name=name, error=str(e))
        return jsonify({'error': f'Failed to load details for {name}. Please try again.'}), 502
    payload = record.to_json()
    payload['evolutions'] = [s.to_json() for s in session.details.resolve_evolution_stages(name)]
    return jsonify(payload)


@bp.route('/api/pokemon/<name>/evolutions')
def pokemon_evolutions(name):
    name = name.strip().lower()
    return jsonify({'name': name, 'chain': _session().details.resolve_evolution_chain(name)})
