"""Clip byte storage.

Audio arrives base64 encoded in JSON bodies and is written as-is under
the configured upload directory. The bytes are never inspected.
"""

import base64
import binascii
import random
import time
from pathlib import Path
from typing import Optional

from flask import current_app

from .errors import MissingPayload, PersistenceFailure

_EXTENSIONS = (
    ('webm', '.webm'),
    ('ogg', '.ogg'),
)


class ClipStore:
    """Writes and removes clip files for the current app.

    Bound like the other extensions: create once at import time and call
    ``init_app`` from the app factory. The upload directory is read from
    ``UPLOAD_DIR`` on every access so tests can point it elsewhere after
    the app is built.
    """

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        app.extensions['clip_store'] = self
        Path(app.config['UPLOAD_DIR']).mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return Path(current_app.config['UPLOAD_DIR'])

    @staticmethod
    def decode(audio_data: Optional[str]) -> bytes:
        """Decode a base64 payload, rejecting empty or malformed data."""
        if not isinstance(audio_data, str) or not audio_data:
            raise MissingPayload('No audio data received')
        if ',' in audio_data and audio_data.startswith('data:'):
            # data URLs: keep only the payload after the header
            audio_data = audio_data.split(',', 1)[1]
        try:
            payload = base64.b64decode(audio_data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise MissingPayload('Audio data is not valid base64') from exc
        if not payload:
            raise MissingPayload('No audio data received')
        return payload

    @staticmethod
    def extension_for(mime_type: Optional[str]) -> str:
        mime = mime_type.lower() if isinstance(mime_type, str) else ''
        for marker, ext in _EXTENSIONS:
            if marker in mime:
                return ext
        return '.wav'

    def make_name(self, slot_index: int, clip_number: int, mime_type: Optional[str]) -> str:
        unique_id = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"player{slot_index}_file{clip_number}_{unique_id}{self.extension_for(mime_type)}"

    def path_for(self, name: str) -> Path:
        return self.directory / name

    def save(self, name: str, payload: bytes) -> Path:
        path = self.path_for(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(payload)
        except OSError as exc:
            current_app.logger.exception(f"[clip-write-fail] clip={name}")
            raise PersistenceFailure('Could not store audio', clip=name) from exc
        current_app.logger.info(f"[clip-saved] clip={name} bytes={len(payload)}")
        return path

    def delete(self, name: str) -> None:
        try:
            self.path_for(name).unlink(missing_ok=True)
        except OSError:
            current_app.logger.warning(f"[clip-delete-fail] clip={name}")
