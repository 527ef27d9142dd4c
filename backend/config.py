import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Seconds a pairing is held open after one side's socket closes
    GRACE_PERIOD_SEC = float(os.environ.get('GRACE_PERIOD_SEC', '10'))
    # Socket.IO namespace game clients connect to
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Comma separated list; "*" allows any origin
    CORS_ALLOWED_ORIGINS = os.environ.get(
        'CORS_ALLOWED_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
    )
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
