import base64
import re

import pytest

from voicerelay import clips
from voicerelay.services.relay.clips import ClipStore
from voicerelay.services.relay.errors import MissingPayload, PersistenceFailure


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def test_decode_plain_and_data_url():
    assert ClipStore.decode(b64(b'RIFF')) == b'RIFF'
    assert ClipStore.decode('data:audio/webm;base64,' + b64(b'webm!')) == b'webm!'


@pytest.mark.parametrize('value', [None, '', 'not base64 at all!', '====', 123, ['QUJD'], {'data': 'QUJD'}])
def test_decode_rejects_missing_or_garbled(value):
    with pytest.raises(MissingPayload):
        ClipStore.decode(value)


@pytest.mark.parametrize('mime, ext', [
    ('audio/webm;codecs=opus', '.webm'),
    ('audio/ogg', '.ogg'),
    ('audio/wav', '.wav'),
    (None, '.wav'),
    (5, '.wav'),
    (['audio/webm'], '.wav'),
])
def test_extension_for_mime(mime, ext):
    assert ClipStore.extension_for(mime) == ext


def test_make_name_encodes_slot_and_clip_number():
    name = clips.make_name(3, 2, 'audio/webm')
    assert re.fullmatch(r'player3_file2_\d+-\d+\.webm', name)


def test_save_and_delete(flask_app, upload_dir):
    path = clips.save('player0_file1_x.wav', b'abc')
    assert path == upload_dir / 'player0_file1_x.wav'
    assert path.read_bytes() == b'abc'
    clips.delete('player0_file1_x.wav')
    assert not path.exists()
    # deleting twice is harmless
    clips.delete('player0_file1_x.wav')


def test_save_failure_is_reported(flask_app, upload_dir):
    # a directory where the file should go makes the write fail
    (upload_dir / 'taken.wav').mkdir()
    with pytest.raises(PersistenceFailure) as excinfo:
        clips.save('taken.wav', b'abc')
    assert excinfo.value.status_code == 500
