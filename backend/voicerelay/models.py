from voicerelay import db
from voicerelay.services.relay.codec import dump_slots, load_slots
import datetime
import string
import random


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


def generate_game_code(length=4):
    """Generate a unique, short game code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if not Game.query.filter_by(game_code=code).first():
            return code


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    game_code = db.Column(db.String(16), unique=True, index=True, nullable=False)
    slots = db.Column(db.Text, nullable=False, default='[]')  # JSON-encoded list of 4-element slot rows
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __init__(self, **kwargs):
        super(Game, self).__init__(**kwargs)
        if not self.game_code:
            self.game_code = generate_game_code()
        if self.slots is None:
            self.slots = '[]'

    @property
    def state(self):
        return load_slots(self.slots)

    @state.setter
    def state(self, value):
        self.slots = dump_slots(value)
