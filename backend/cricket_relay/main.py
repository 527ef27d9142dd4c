from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the hand cricket relay server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok'})


@main.route('/stats')
def stats():
    """Counts only; identifiers are never exposed over HTTP."""
    service = current_app.extensions['pairing']
    return jsonify(service.snapshot())
