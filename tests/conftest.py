"""Shared test doubles."""

import pytest


class RecordingSink:
    def __init__(self):
        self.scores = []
        self.results = []

    def score_changed(self, player_id, score):
        self.scores.append((player_id, score))

    def match_finished(self, winner_name):
        self.results.append(winner_name)


@pytest.fixture()
def sink():
    return RecordingSink()
