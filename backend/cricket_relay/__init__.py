from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

# async_handlers=False keeps each client's events in arrival order, which
# preserves per-sender ordering of relayed messages.
socketio = SocketIO(async_mode=None, async_handlers=False)


def _origins(value):
    if isinstance(value, (list, tuple)):
        return list(value)
    origins = [o.strip() for o in (value or '').split(',') if o.strip()]
    if origins == ['*']:
        return '*'
    return origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One pairing state object per app; never shared across apps
    from cricket_relay.services.pairing import MessageRouter, PairingService
    service = PairingService(grace_period_sec=flask_app.config.get('GRACE_PERIOD_SEC', 10.0))
    flask_app.extensions['pairing'] = service
    flask_app.extensions['pairing_router'] = MessageRouter(service)

    from cricket_relay.main import main
    flask_app.register_blueprint(main)

    from cricket_relay.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))

    return flask_app
