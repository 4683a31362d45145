from imposter import db
import json
import time


PHASES = ('word_reveal', 'discussion', 'voting', 'results')


class Lobby(db.Model):
    __tablename__ = 'lobby'
    code = db.Column(db.String(6), primary_key=True)
    host_player_id = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(20), default='waiting', nullable=False)  # waiting, playing, finished
    category = db.Column(db.String(100), nullable=True)
    round_duration_seconds = db.Column(db.Integer, default=300, nullable=False)
    total_rounds = db.Column(db.Integer, default=3, nullable=False)
    current_round = db.Column(db.Integer, default=1, nullable=False)
    player_count = db.Column(db.Integer, default=0, nullable=False)  # claimed before a Player row is inserted
    created_at = db.Column(db.Float, default=time.time, nullable=False)

    def to_dict(self):
        return {
            'code': self.code,
            'host_player_id': self.host_player_id,
            'status': self.status,
            'category': self.category,
            'round_duration': self.round_duration_seconds,
            'total_rounds': self.total_rounds,
            'current_round': self.current_round,
        }


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.String(255), primary_key=True)
    lobby_code = db.Column(db.String(6), db.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    avatar_color = db.Column(db.String(20), nullable=True)
    is_host = db.Column(db.Boolean, default=False, nullable=False)
    seat = db.Column(db.Integer, default=0, nullable=False)  # 0 = host, then join order
    joined_at = db.Column(db.Float, default=time.time, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'avatar_color': self.avatar_color,
            'is_host': self.is_host,
        }


class Round(db.Model):
    __tablename__ = 'game_round'
    __table_args__ = (db.UniqueConstraint('lobby_code', 'round_number', name='uq_round_lobby_number'),)
    id = db.Column(db.Integer, primary_key=True)
    lobby_code = db.Column(db.String(6), db.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    imposter_id = db.Column(db.String(255), nullable=False)
    word = db.Column(db.String(100), nullable=False)
    category = db.Column(db.String(100), nullable=False)
    phase = db.Column(db.String(20), default='word_reveal', nullable=False)
    # Countdown anchor; reset when discussion starts
    round_start_time = db.Column(db.Float, nullable=False)
    round_end_time = db.Column(db.Float, nullable=True)

    def elapsed_seconds(self, now=None):
        now = time.time() if now is None else now
        return max(0.0, now - (self.round_start_time or now))

    def to_dict(self, now=None):
        return {
            'round_number': self.round_number,
            'imposter_id': self.imposter_id,
            'word': self.word,
            'category': self.category,
            'phase': self.phase,
            'round_start_time': self.round_start_time,
            'round_end_time': self.round_end_time,
            'elapsed_seconds': self.elapsed_seconds(now),
        }


class Vote(db.Model):
    __tablename__ = 'vote'
    __table_args__ = (db.UniqueConstraint('lobby_code', 'round_number', 'voter_id', name='uq_vote_voter_per_round'),)
    id = db.Column(db.Integer, primary_key=True)
    lobby_code = db.Column(db.String(6), db.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    voter_id = db.Column(db.String(255), db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False)
    voted_for_id = db.Column(db.String(255), db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False)

    def to_dict(self):
        return {
            'voter_id': self.voter_id,
            'voted_for_id': self.voted_for_id,
        }


class Elimination(db.Model):
    __tablename__ = 'elimination'
    __table_args__ = (db.UniqueConstraint('lobby_code', 'player_id', name='uq_elimination_player'),)
    id = db.Column(db.Integer, primary_key=True)
    lobby_code = db.Column(db.String(6), db.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    player_id = db.Column(db.String(255), db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False)


class Score(db.Model):
    __tablename__ = 'score'
    __table_args__ = (db.UniqueConstraint('lobby_code', 'player_id', name='uq_score_player'),)
    id = db.Column(db.Integer, primary_key=True)
    lobby_code = db.Column(db.String(6), db.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False, index=True)
    player_id = db.Column(db.String(255), db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False)
    total_score = db.Column(db.Integer, default=0, nullable=False)
    correct_votes = db.Column(db.Integer, default=0, nullable=False)
    survived_as_imposter = db.Column(db.Integer, default=0, nullable=False)
    rounds_as_imposter = db.Column(db.Integer, default=0, nullable=False)

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'total_score': self.total_score,
            'correct_votes': self.correct_votes,
            'survived_as_imposter': self.survived_as_imposter,
            'rounds_as_imposter': self.rounds_as_imposter,
        }


class GameHistory(db.Model):
    __tablename__ = 'game_history'
    id = db.Column(db.Integer, primary_key=True)
    lobby_code = db.Column(db.String(6), nullable=False)
    player_id = db.Column(db.String(255), nullable=False)
    player_name = db.Column(db.String(100), nullable=False, index=True)
    opponent_id = db.Column(db.String(255), nullable=False)
    opponent_name = db.Column(db.String(100), nullable=False)
    won = db.Column(db.Boolean, default=False, nullable=False)
    was_imposter = db.Column(db.Boolean, default=False, nullable=False)
    caught_as_imposter = db.Column(db.Boolean, default=False, nullable=False)
    survived_as_imposter = db.Column(db.Boolean, default=False, nullable=False)
    played_at = db.Column(db.Float, default=time.time, nullable=False)


class WordCategory(db.Model):
    __tablename__ = 'word_category'
    category = db.Column(db.String(100), primary_key=True)
    words = db.Column(db.Text, nullable=False)  # JSON-encoded list of words

    @property
    def word_list(self):
        try:
            return json.loads(self.words or '[]')
        except ValueError:
            return []


DEFAULT_CATEGORIES = {
    'Animals': ['Dog', 'Cat', 'Elephant', 'Lion', 'Tiger', 'Bear', 'Eagle', 'Shark', 'Dolphin', 'Penguin',
                'Giraffe', 'Zebra', 'Monkey', 'Snake', 'Rabbit'],
    'Food': ['Pizza', 'Burger', 'Sushi', 'Pasta', 'Tacos', 'Ice Cream', 'Chocolate', 'Salad', 'Steak',
             'Sandwich', 'Soup', 'Cake', 'Cookies', 'Apple', 'Banana'],
    'Movies': ['Titanic', 'Avatar', 'Inception', 'Frozen', 'Jaws', 'Matrix', 'Gladiator', 'Joker', 'Parasite',
               'Shrek', 'Up', 'Coco', 'Moana', 'Deadpool', 'Interstellar'],
    'Sports': ['Soccer', 'Basketball', 'Tennis', 'Golf', 'Swimming', 'Boxing', 'Cricket', 'Rugby', 'Hockey',
               'Baseball', 'Volleyball', 'Skiing', 'Surfing', 'Cycling', 'Running'],
}


def seed_categories(categories=None):
    """Insert the default word categories, leaving existing ones untouched."""
    categories = categories or DEFAULT_CATEGORIES
    for name, words in categories.items():
        if db.session.get(WordCategory, name) is None:
            db.session.add(WordCategory(category=name, words=json.dumps(words)))
    db.session.commit()
