from combat_logger.combat.damage import LOGOUT, OtherCause, PlayerAttack
from combat_logger.events import BROADCAST, COMMAND, MESSAGE, PLAYER_DAMAGED, PLAYER_DIED, PLAYER_DISCONNECTED, EventBus
from combat_logger.items import ItemStack
from combat_logger.plugin import CombatLoggerPlugin
from combat_logger.settings import CombatSettings
from combat_logger.world.grid import BlockPos

from conftest import ALICE, BOB, CAROL


def make_plugin(settings, scheduler, players, worlds, messenger=None, commands=None, bus=None):
    plugin = CombatLoggerPlugin(
        settings,
        bus or EventBus(),
        scheduler,
        players,
        worlds,
        messenger=messenger,
        commands=commands,
    )
    plugin.enable()
    return plugin


def test_player_attack_tags_both_players(settings, scheduler, players, worlds, messenger, commands):
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)

    assert plugin.on_player_damaged(ALICE, PlayerAttack(BOB)) is True

    assert plugin.tracker.is_in_combat(ALICE)
    assert plugin.tracker.is_in_combat(BOB)
    assert plugin.tracker.last_aggressor(ALICE) == BOB
    assert plugin.tracker.last_aggressor(BOB) is None
    assert plugin.tracker.timer_running


def test_non_player_damage_is_ignored(settings, scheduler, players, worlds, messenger, commands):
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)
    assert plugin.on_player_damaged(ALICE, OtherCause("fall")) is False
    assert plugin.on_player_damaged(ALICE, PlayerAttack(ALICE)) is False
    assert plugin.on_player_damaged(ALICE, PlayerAttack(4242)) is False
    assert len(plugin.tracker) == 0
    assert not plugin.tracker.timer_running


def test_exempt_operator_only_tags_the_other_side(scheduler, players, worlds, messenger, commands):
    settings = CombatSettings(operators_can_be_in_combat=False)
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)
    assert plugin.on_player_damaged(ALICE, PlayerAttack(CAROL)) is True
    assert plugin.tracker.identities() == [ALICE]


def test_combat_expires_through_the_scheduler(settings, scheduler, players, worlds, messenger, commands):
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)
    plugin.on_player_damaged(ALICE, PlayerAttack(BOB))

    scheduler.advance(4.0)
    assert plugin.tracker.remaining_seconds(ALICE) == 1
    scheduler.advance(1.0)

    assert len(plugin.tracker) == 0
    assert not plugin.tracker.timer_running
    assert messenger.texts_for(ALICE)[-1] == "You are no longer in combat."
    assert messenger.texts_for(BOB)[-1] == "You are no longer in combat."


def test_hit_refreshes_countdown(settings, scheduler, players, worlds, messenger, commands):
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)
    plugin.on_player_damaged(ALICE, PlayerAttack(BOB))
    scheduler.advance(3.0)
    plugin.on_player_damaged(BOB, PlayerAttack(ALICE))
    assert plugin.tracker.remaining_seconds(ALICE) == 5
    assert plugin.tracker.last_aggressor(BOB) == ALICE


def test_disconnect_in_combat_is_penalised(settings, scheduler, players, worlds, messenger, commands, world):
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)
    alice = players.get(ALICE)
    alice.inventory.set_slot("main", 3, ItemStack(264, count=5))
    plugin.on_player_damaged(ALICE, PlayerAttack(BOB))

    outcome = plugin.on_player_disconnected(ALICE)

    assert messenger.broadcasts == ["Alice logged out while in combat!"]
    assert outcome.killer == BOB
    assert commands.executed == [("function death", ALICE), ("function killer", BOB)]
    assert world.dropped_count() == 5
    assert not plugin.tracker.is_in_combat(ALICE)


def test_disconnect_out_of_combat_does_nothing(settings, scheduler, players, worlds, messenger, commands):
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)
    assert plugin.on_player_disconnected(ALICE) is None
    assert messenger.broadcasts == []
    assert commands.executed == []


def test_death_sequence_can_require_combat(scheduler, players, worlds, messenger, commands):
    settings = CombatSettings(death_sequence_requires_combat=True)
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)

    assert plugin.on_player_died(ALICE, OtherCause("fall")) is None
    assert commands.executed == []

    plugin.on_player_damaged(ALICE, PlayerAttack(BOB))
    outcome = plugin.on_player_died(ALICE, PlayerAttack(BOB), BlockPos(0, 64, 0))
    assert outcome.killer == BOB


def test_death_of_unknown_player_is_ignored(settings, scheduler, players, worlds, messenger, commands, caplog):
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)
    assert plugin.on_player_died(4242, LOGOUT) is None
    assert "unknown player 4242" in caplog.text


def test_admin_clear(settings, scheduler, players, worlds, messenger, commands):
    plugin = make_plugin(settings, scheduler, players, worlds, messenger, commands)
    plugin.on_player_damaged(ALICE, PlayerAttack(BOB))
    assert plugin.clear(ALICE) is True
    assert plugin.clear(ALICE) is False
    plugin.clear(BOB)
    assert not plugin.tracker.timer_running


def test_host_events_on_the_bus(settings, scheduler, players, worlds):
    bus = EventBus()
    chat, announcements, issued = [], [], []
    bus.subscribe(MESSAGE, lambda e: chat.append((e.payload["identity"], e.payload["text"])))
    bus.subscribe(BROADCAST, lambda e: announcements.append(e.payload["text"]))
    bus.subscribe(COMMAND, lambda e: issued.append((e.payload["command"], e.payload["origin"])))
    plugin = make_plugin(settings, scheduler, players, worlds, bus=bus)

    bus.publish(PLAYER_DAMAGED, {"victim": ALICE, "source": PlayerAttack(BOB)})
    assert (ALICE, settings.initiated_combat_message) in chat

    bus.publish(PLAYER_DIED, {"victim": ALICE, "source": PlayerAttack(BOB), "position": None})
    assert issued == [("function death", ALICE), ("function killer", BOB)]
    assert announcements[0].startswith("Alice was slain by Bob")
    assert not plugin.tracker.is_in_combat(ALICE)

    bus.publish(PLAYER_DISCONNECTED, {"identity": BOB})
    assert announcements[-1] == "Bob logged out while in combat!"


def test_disable_unsubscribes_and_forgets_sessions(settings, scheduler, players, worlds):
    bus = EventBus()
    plugin = make_plugin(settings, scheduler, players, worlds, bus=bus)
    bus.publish(PLAYER_DAMAGED, {"victim": ALICE, "source": PlayerAttack(BOB)})
    assert len(plugin.tracker) == 2

    plugin.disable()
    plugin.disable()

    assert not plugin.enabled
    assert len(plugin.tracker) == 0
    assert not plugin.tracker.timer_running
    assert bus.subscriber_count(PLAYER_DAMAGED) == 0
    bus.publish(PLAYER_DAMAGED, {"victim": ALICE, "source": PlayerAttack(BOB)})
    assert len(plugin.tracker) == 0


def test_enable_twice_subscribes_once(settings, scheduler, players, worlds):
    bus = EventBus()
    plugin = make_plugin(settings, scheduler, players, worlds, bus=bus)
    plugin.enable()
    assert bus.subscriber_count(PLAYER_DIED) == 1
