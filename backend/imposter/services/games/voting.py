from flask import current_app
from sqlalchemy.exc import IntegrityError

from imposter import db
from imposter.errors import InvalidStateError, ValidationError
from imposter.models import Vote
from .state import get_lobby, current_round, lobby_players, eliminated_ids


def cast_vote(code, voter_id, voted_for_id) -> Vote:
    """Record ``voter_id``'s vote for the current round, replacing any earlier one."""
    if not all([code, voter_id, voted_for_id]):
        raise ValidationError('Code, player ID and vote target are required')
    lobby = get_lobby(code)
    if lobby.status != 'playing':
        raise InvalidStateError('Game is not in progress')
    rnd = current_round(lobby)
    if rnd is None or rnd.phase != 'voting':
        raise InvalidStateError('Not accepting votes at this time')
    if voter_id == voted_for_id:
        raise ValidationError('You cannot vote for yourself')

    player_ids = {p.id for p in lobby_players(lobby.code)}
    if voter_id not in player_ids or voted_for_id not in player_ids:
        raise ValidationError('Invalid player(s)')
    gone = set(eliminated_ids(lobby.code))
    if voter_id in gone:
        raise InvalidStateError('Eliminated players cannot vote')
    if voted_for_id in gone:
        raise ValidationError('That player has already been eliminated')

    key = dict(lobby_code=lobby.code, round_number=rnd.round_number, voter_id=voter_id)
    vote = Vote.query.filter_by(**key).first()
    if vote:
        vote.voted_for_id = voted_for_id
    else:
        vote = Vote(voted_for_id=voted_for_id, **key)
        db.session.add(vote)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent first vote from the same voter won the insert
        db.session.rollback()
        Vote.query.filter_by(**key).update({Vote.voted_for_id: voted_for_id}, synchronize_session=False)
        db.session.commit()
        vote = Vote.query.filter_by(**key).first()
    current_app.logger.info(
        f"[vote] lobby={lobby.code} round={rnd.round_number} voter={voter_id} target={voted_for_id}"
    )
    return vote


def all_votes_in(code) -> bool:
    """True when every active player that has someone to vote for has voted."""
    lobby = get_lobby(code)
    rnd = current_round(lobby)
    if lobby.status != 'playing' or rnd is None or rnd.phase != 'voting':
        return False
    gone = set(eliminated_ids(lobby.code))
    eligible = {p.id for p in lobby_players(lobby.code) if p.id not in gone}
    if len(eligible) < 2:
        return False
    voted = {v.voter_id for v in Vote.query.filter_by(lobby_code=lobby.code, round_number=rnd.round_number).all()}
    return eligible.issubset(voted)
