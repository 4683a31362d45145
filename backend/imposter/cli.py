import time

import click

from imposter import db
from imposter.errors import GameError
from imposter.services.games.bots import BOT_PREFIX, BotDirector
from imposter.services.games.clock import CountdownClock, format_time
from imposter.services.games.lobby import create_lobby, join_lobby, start_game
from imposter.services.games.state import game_snapshot
from imposter.services.games.rounds import close_voting
from imposter.services.games.voting import all_votes_in, cast_vote


def register_cli(flask_app):

    @flask_app.cli.command('create-test-game')
    @click.option('--bots', default=3, show_default=True, help='Number of bot players to add.')
    @click.option('--rounds', default=3, show_default=True, help='Total rounds.')
    @click.option('--duration', default=60, show_default=True, help='Discussion length in seconds.')
    @click.option('--category', default='Animals', show_default=True)
    def create_test_game_command(bots, rounds, duration, category):
        """Creates a lobby with a host and bot players, then starts it."""
        stamp = int(time.time() * 1000)
        host = create_lobby('Host (You)', f'host-{stamp}')
        for i in range(1, bots + 1):
            join_lobby(host.lobby_code, f'Bot {i}', f'{BOT_PREFIX}player-{i}-{stamp}')
        start_game(host.lobby_code, category, duration, rounds)
        click.echo(f'Lobby {host.lobby_code} started; host id {host.id}')

    @flask_app.cli.command('run-bots')
    @click.argument('code')
    @click.option('--polls', default=0, help='Stop after this many polls (0 = until the game ends).')
    def run_bots_command(code, polls):
        """Polls a lobby, casting bot votes and printing the discussion countdown."""
        cfg = flask_app.config

        def submit(lobby_code, voter_id, target_id):
            with flask_app.app_context():
                cast_vote(lobby_code, voter_id, target_id)
                if cfg.get('AUTO_RESULTS_ON_ALL_VOTES') and all_votes_in(lobby_code):
                    close_voting(lobby_code)

        director = BotDirector(
            submit,
            rng=flask_app.extensions['game_rng'],
            min_delay=float(cfg.get('BOT_MIN_DELAY_SEC', 1)),
            max_delay=float(cfg.get('BOT_MAX_DELAY_SEC', 5)),
            log=flask_app.logger,
        )
        clock = CountdownClock(on_threshold=lambda t: click.echo(f'  !! {format_time(t)} left'))
        interval = float(cfg.get('POLL_INTERVAL_SEC', 2))

        count = 0
        while True:
            # Fresh session per poll so rows written by other requests are visible
            db.session.remove()
            try:
                snapshot = game_snapshot(code)
            except GameError as exc:
                raise click.ClickException(exc.message)
            count += 1
            clock.sync(snapshot)
            rnd = snapshot['round'] or {}
            click.echo(
                f"round={snapshot['lobby']['current_round']} phase={rnd.get('phase')} "
                f"remaining={format_time(clock.remaining())} votes={len(snapshot['votes'])}"
            )
            for bot_id in director.observe(snapshot):
                click.echo(f'  scheduled vote for {bot_id}')
            if snapshot['lobby']['status'] == 'finished' or (polls and count >= polls):
                break
            # Extrapolate locally between polls
            deadline = time.monotonic() + interval
            while time.monotonic() < deadline:
                clock.tick()
                time.sleep(0.1)
