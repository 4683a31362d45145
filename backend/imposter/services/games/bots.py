"""Simulated players for test games.

Bots are players whose id starts with ``bot-``. While a round is in voting,
each active bot that has not voted gets exactly one delayed vote for a
random other active player. The scheduled marker is keyed by
(lobby, round, bot), so repeated polls before the timer fires never queue a
second vote.
"""

import logging
import random
import threading
from typing import Callable, List, Optional, Set, Tuple

BOT_PREFIX = 'bot-'

logger = logging.getLogger(__name__)


def _spawn_timer(delay: float, fn: Callable, *args) -> None:
    timer = threading.Timer(delay, fn, args=args)
    timer.daemon = True
    timer.start()


def is_bot(player_id) -> bool:
    return str(player_id or '').startswith(BOT_PREFIX)


class BotDirector:

    def __init__(self, submit_vote: Callable[[str, str, str], None],
                 rng: Optional[random.Random] = None,
                 min_delay: float = 1.0, max_delay: float = 5.0,
                 spawn: Callable = _spawn_timer,
                 log: Optional[logging.Logger] = None):
        self.submit_vote = submit_vote
        self.rng = rng or random.Random()
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.spawn = spawn
        self.log = log or logger
        self._scheduled: Set[Tuple[str, int, str]] = set()
        self._lock = threading.Lock()

    def observe(self, snapshot: dict) -> List[str]:
        """Schedule votes for bots that still need one. Returns the bot ids scheduled."""
        lobby = snapshot.get('lobby') or {}
        rnd = snapshot.get('round') or {}
        if lobby.get('status') != 'playing' or rnd.get('phase') != 'voting':
            return []

        code = lobby.get('code')
        round_number = lobby.get('current_round')
        gone = set(snapshot.get('eliminatedIds') or [])
        active = [p for p in snapshot.get('players') or [] if p['id'] not in gone]
        voted = {v['voter_id'] for v in snapshot.get('votes') or []}

        scheduled = []
        for bot in active:
            if not is_bot(bot['id']) or bot['id'] in voted:
                continue
            key = (code, round_number, bot['id'])
            with self._lock:
                if key in self._scheduled:
                    continue
                self._scheduled.add(key)
            targets = [p for p in active if p['id'] != bot['id']]
            if not targets:
                continue
            target = self.rng.choice(targets)
            delay = self.rng.uniform(self.min_delay, self.max_delay)
            self.spawn(delay, self._deliver, code, bot, target)
            scheduled.append(bot['id'])
        return scheduled

    def _deliver(self, code: str, bot: dict, target: dict) -> None:
        try:
            self.log.info(f"[bot-vote] lobby={code} bot={bot['name']} target={target['name']}")
            self.submit_vote(code, bot['id'], target['id'])
        except Exception:
            self.log.exception(f"[bot-vote-error] lobby={code} bot={bot['id']}")
