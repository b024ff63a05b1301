import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'audio-relay-secret'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'voicerelay.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Recorded clips land here and are served from /uploads
    UPLOAD_DIR = os.environ.get('UPLOAD_DIR') or os.path.join(BASE_DIR, 'uploads')
    # Base64 audio bodies can be large
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_UPLOAD_MB', '50')) * 1024 * 1024
    # Shared game every client lands in; created on first use
    DEFAULT_GAME_CODE = os.environ.get('DEFAULT_GAME_CODE', 'MAIN').upper()
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3001,http://127.0.0.1:3001',
        ).split(',') if o.strip()
    ]
