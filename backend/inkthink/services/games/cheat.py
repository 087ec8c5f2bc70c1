import logging
from typing import Optional

from inkthink.services.classifier import DRAWING, Verdict
from .scoring import apply_penalty


class CheatDetector:
    """Throttled gateway between drawer snapshots and the image classifier.

    Accepted checks are limited to one per room per
    ``rules.cheat_check_interval_ms`` regardless of how often clients ask.
    The classifier runs without the room lock held, and any failure counts
    as a ``drawing`` verdict.
    """

    def __init__(self, engine, classifier, logger=None):
        self.engine = engine
        self.classifier = classifier
        self.logger = logger or logging.getLogger(__name__)

    @property
    def rules(self):
        return self.engine.rules

    def check_cheating(self, room_id: str, sid: str, snapshot) -> Optional[Verdict]:
        """Returns the verdict of an accepted check, or None when the request was dropped."""
        with self.engine.locked(room_id) as room:
            if room is None or not room.round_active or room.drawer != sid:
                return None
            now = self.engine.scheduler.now()
            last = room.last_cheat_check_at
            if last is not None and now - last < self.rules.cheat_check_interval_ms:
                return None
            room.last_cheat_check_at = now
            word = room.secret_word
            epoch = room.epoch

        verdict = self._classify(room_id, snapshot, word)
        if not verdict.is_text:
            return verdict

        with self.engine.locked(room_id) as room:
            if room is None or room.epoch != epoch or not room.game_active:
                return verdict
            apply_penalty(room, sid, self.rules.cheating_penalty)
            drawer = room.name_of(sid)
            self.logger.info(f"[cheat-detected] room={room_id} drawer={drawer}")
            self.engine.notifier.broadcast(room_id, 'cheating_detected', {
                'drawer': drawer,
                'scores': room.scoreboard(),
                'message': 'Drawer attempted cheating! Penalty imposed',
            })
        return verdict

    def _classify(self, room_id: str, snapshot, word: str) -> Verdict:
        if not snapshot:
            return Verdict(DRAWING, 'empty snapshot')
        try:
            verdict = self.classifier.classify(snapshot, word)
        except Exception as exc:
            self.logger.warning(f"[cheat-check-failed] room={room_id} error={exc!r}")
            return Verdict(DRAWING, 'classifier unavailable')
        self.logger.info(f"[cheat-check] room={room_id} verdict={verdict.verdict}")
        return verdict
