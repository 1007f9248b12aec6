"""Tests for serial number resequencing."""

import pytest

from auction.models import Player
from auction.serials import plan_shift, resequence

ROWS = [(10, 1), (11, 2), (12, 3), (13, 4)]


def apply(rows, shifts):
    return sorted(shifts.get(pid, serial) for pid, serial in rows)


class TestPlanShift:
    def test_new_player_inserted_into_taken_serial(self):
        shifts = plan_shift(ROWS, None, 2)
        assert shifts == {11: 3, 12: 4, 13: 5}
        assert apply(ROWS, shifts) == [1, 3, 4, 5]

    def test_new_player_on_free_serial_moves_nobody(self):
        assert plan_shift(ROWS, None, 7) == {}

    def test_move_down_the_order(self):
        # Player 11 goes from 2 to 4: 3 and 4 close the gap
        assert plan_shift(ROWS, 2, 4, moved_id=11) == {12: 2, 13: 3}

    def test_move_up_the_order(self):
        # Player 13 goes from 4 to 1: everyone from 1 to 3 steps back
        assert plan_shift(ROWS, 4, 1, moved_id=13) == {10: 2, 11: 3, 12: 4}

    def test_clearing_closes_the_gap(self):
        assert plan_shift(ROWS, 2, None, moved_id=11) == {12: 2, 13: 3}

    def test_same_serial_is_noop(self):
        assert plan_shift(ROWS, 3, 3, moved_id=12) == {}

    def test_unnumbered_rows_ignored(self):
        rows = ROWS + [(14, None)]
        assert 14 not in plan_shift(rows, None, 1)


@pytest.mark.django_db
class TestResequence:
    def serials(self):
        return list(Player.objects.order_by('name').values_list('name', 'serial_number'))

    def test_insert_writes_shifted_serials(self, make_player):
        for n, name in enumerate('ABCD', start=1):
            make_player(name=name, serial_number=n)

        assert resequence(None, 2) == 3
        assert self.serials() == [('A', 1), ('B', 3), ('C', 4), ('D', 5)]

    def test_move_excludes_moved_player(self, make_player):
        players = [make_player(name=name, serial_number=n) for n, name in enumerate('ABC', start=1)]
        a = players[0]

        resequence(1, 3, moved_id=a.id)
        Player.objects.filter(pk=a.pk).update(serial_number=3)
        assert self.serials() == [('A', 3), ('B', 1), ('C', 2)]
