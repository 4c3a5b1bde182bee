from __future__ import annotations

from zombiemath.core.collisions import resolve_companion_collisions, resolve_player_collisions
from zombiemath.core.entities import Enemy, Player

HIT = 22.0


def test_enemy_just_inside_hit_distance_hits_once() -> None:
    player = Player(x=0.0, y=0.0, health=5)
    enemy = Enemy(x=HIT - 0.01, y=0.0, speed=0.4)

    hits = resolve_player_collisions(player, [enemy], HIT)

    assert hits.damaged is True
    assert hits.enemies_removed == [enemy]
    assert hits.remaining == []
    assert player.health == 4


def test_enemy_just_outside_hit_distance_is_ignored() -> None:
    player = Player(x=0.0, y=0.0, health=5)
    enemy = Enemy(x=0.0, y=HIT + 0.01, speed=0.4)

    hits = resolve_player_collisions(player, [enemy], HIT)

    assert hits.damaged is False
    assert hits.enemies_removed == []
    assert hits.remaining == [enemy]
    assert player.health == 5


def test_hit_distance_is_strict() -> None:
    player = Player(x=0.0, y=0.0, health=5)
    hits = resolve_player_collisions(player, [Enemy(x=HIT, y=0.0, speed=0.4)], HIT)
    assert hits.damaged is False


def test_simultaneous_hits_each_deal_damage() -> None:
    player = Player(x=0.0, y=0.0, health=5)
    near = [Enemy(x=1.0, y=0.0, speed=0.4), Enemy(x=0.0, y=-3.0, speed=0.4), Enemy(x=-5.0, y=5.0, speed=0.4)]
    far = Enemy(x=200.0, y=0.0, speed=0.4)

    hits = resolve_player_collisions(player, [near[0], far, near[1], near[2]], HIT)

    assert player.health == 2
    assert hits.enemies_removed == near
    assert hits.remaining == [far]


def test_health_clamps_at_zero() -> None:
    player = Player(x=0.0, y=0.0, health=1)
    enemies = [Enemy(x=0.0, y=0.0, speed=0.4) for _ in range(3)]

    resolve_player_collisions(player, enemies, HIT)

    assert player.health == 0


def test_companion_removes_enemies_without_damage() -> None:
    player = Player(x=0.0, y=0.0, health=5)
    touching = Enemy(x=75.0, y=0.0, speed=0.4)
    clear = Enemy(x=0.0, y=-200.0, speed=0.4)

    result = resolve_companion_collisions((70.0, 0.0), [touching, clear], 20.0)

    assert result.removed_count == 1
    assert result.remaining == [clear]
    assert player.health == 5
