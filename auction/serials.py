"""
Serial numbers give players their draw order.

Changing one player's serial shifts the others so the sequence stays dense
and free of collisions. The shifted rows are written back in one batch.
"""
from .models import Player


def plan_shift(rows, old, new, moved_id=None):
    """
    Return ``{player_id: new_serial}`` for the players that have to move.

    ``rows`` is an iterable of ``(player_id, serial_number)`` pairs for every
    numbered player; ``moved_id`` is the player whose serial is changing
    (None for a player that is not saved yet).
    """
    if old == new:
        return {}

    others = [(pid, serial) for pid, serial in rows
              if serial is not None and pid != moved_id]

    if new is None:
        return {pid: serial - 1 for pid, serial in others if serial > old}

    if old is None:
        if not any(serial == new for _, serial in others):
            return {}
        return {pid: serial + 1 for pid, serial in others if serial >= new}

    if old < new:
        return {pid: serial - 1 for pid, serial in others if old < serial <= new}
    return {pid: serial + 1 for pid, serial in others if new <= serial < old}


def resequence(old, new, moved_id=None):
    """Apply the shift for a serial change; call inside transaction.atomic()"""
    if old == new:
        return 0

    numbered = (
        Player.objects.select_for_update()
        .filter(serial_number__isnull=False)
        .values_list('id', 'serial_number')
    )
    shifts = plan_shift(numbered, old, new, moved_id)
    if not shifts:
        return 0

    players = list(Player.objects.filter(id__in=shifts))
    for player in players:
        player.serial_number = shifts[player.id]
    Player.objects.bulk_update(players, ['serial_number'])
    return len(players)
