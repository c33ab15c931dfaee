"""
Settings Public Routes
======================

Read-only settings API: a JSON snapshot and a live Server-Sent Events stream.
"""

import json
import queue

from flask import Response, jsonify
from flask_cors import cross_origin

from . import settings_bp
from ...core.context import current_folio

# Seconds between SSE comments that keep idle proxies from closing the stream
KEEPALIVE_SECONDS = 25


@settings_bp.route('/settings', methods=['GET'])
@cross_origin()
def get_settings():
    """Current settings snapshot - public endpoint."""
    store = current_folio().settings_store
    return jsonify({'success': True, 'settings': store.snapshot.to_dict()})


@settings_bp.route('/settings/stream', methods=['GET'])
@cross_origin()
def stream_settings():
    """Push every new settings snapshot as an SSE `data:` frame."""
    store = current_folio().settings_store
    updates = queue.Queue()
    subscription = store.subscribe(updates.put)

    def generate():
        try:
            while True:
                try:
                    snapshot = updates.get(timeout=KEEPALIVE_SECONDS)
                except queue.Empty:
                    yield ': keep-alive\n\n'
                    continue
                yield f"data: {json.dumps(snapshot.to_dict())}\n\n"
        finally:
            subscription.close()

    response = Response(
        generate(),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )
    response.call_on_close(subscription.close)
    return response
