import numpy as np
import pygame
import pytest

from constants import CLICK_JITTER
from particle_system import ParticleSystem


@pytest.fixture
def empty_system(network_config, rng):
    return ParticleSystem(network_config, rng, (1000, 1000), populate=False)


class TestSpawning:
    def test_initial_count_on_reference_canvas(self, network_config, rng):
        system = ParticleSystem(network_config, rng, (1000, 1000))
        assert len(system.particles) == 100

    def test_initial_count_scales_with_area(self, network_config, rng):
        system = ParticleSystem(network_config, rng, (1280, 800))
        # floor(100 * 1.024)
        assert len(system.particles) == 102

    def test_initial_particles_within_canvas_and_speed(self, network_config, rng):
        system = ParticleSystem(network_config, rng, (640, 480))
        for p in system.particles:
            assert 0 <= p.position[0] <= 640
            assert 0 <= p.position[1] <= 480
            assert np.all(np.abs(p.velocity) <= 2)
            assert p.lifecycle is None

    def test_spawn_at_respects_maximum(self, network_config, rng):
        network_config['max_particles'] = 3
        system = ParticleSystem(network_config, rng, (1000, 1000), populate=False)
        for _ in range(3):
            assert system.spawn_at(10, 10) is not None

        assert system.spawn_at(10, 10) is None
        assert system.spawn_at(10, 10, from_click=True) is None
        assert len(system.particles) == 3

    def test_spawn_at_random_position_when_missing(self, empty_system):
        particle = empty_system.spawn_at()
        assert 0 <= particle.position[0] <= 1000
        assert 0 <= particle.position[1] <= 1000

    def test_click_spawned_particle(self, empty_system):
        particle = empty_system.spawn_at(300, 400, from_click=True)
        assert list(particle.position) == [300, 400]
        assert particle.lifecycle.remaining == 300
        assert particle.is_transitioning
        assert particle.display_color == 150
        assert np.all(np.abs(particle.velocity) <= 3)

    def test_remove_out_of_range_is_ignored(self, empty_system):
        empty_system.spawn_at(10, 10)
        empty_system.remove_particle(5)
        empty_system.remove_particle(-1)
        assert len(empty_system.particles) == 1
        empty_system.remove_particle(0)
        assert empty_system.particles == []


class TestClick:
    def test_click_spawns_burst_around_point(self, network_config, rng):
        system = ParticleSystem(network_config, rng, (1000, 1000))
        before = len(system.particles)

        spawned = system.on_click(500, 500)

        assert len(spawned) == 5
        assert len(system.particles) == before + 5
        for p in spawned:
            assert abs(p.position[0] - 500) <= CLICK_JITTER
            assert abs(p.position[1] - 500) <= CLICK_JITTER
            assert p.display_color == 150

    def test_click_near_maximum_spawns_what_fits(self, network_config, rng):
        network_config['max_particles'] = 3
        system = ParticleSystem(network_config, rng, (1000, 1000), populate=False)
        assert len(system.on_click(100, 100)) == 3
        assert system.on_click(100, 100) == []
        assert len(system.particles) == 3

    def test_click_during_frame_is_deferred(self, empty_system, screen):
        empty_system._in_frame = True
        assert empty_system.on_click(500, 500) == []
        assert empty_system.particles == []
        empty_system._in_frame = False

        empty_system.frame_step(screen)
        assert len(empty_system.particles) == 5


class TestLifecycle:
    def test_half_life_color_between_spawn_and_base(self, empty_system):
        particle = empty_system.spawn_at(500, 500, from_click=True)
        for _ in range(150):
            empty_system.tick_lifecycles()
        assert 150 < particle.display_color < 200

    def test_expired_particles_are_removed(self, empty_system):
        empty_system.spawn_at(100, 100)
        clicked = empty_system.spawn_at(500, 500, from_click=True)
        for _ in range(299):
            empty_system.tick_lifecycles()
        assert clicked in empty_system.particles

        assert empty_system.tick_lifecycles() == 1
        assert clicked not in empty_system.particles
        assert len(empty_system.particles) == 1

    def test_removal_keeps_other_particles(self, network_config, rng):
        network_config['particle_lifespan'] = 1
        system = ParticleSystem(network_config, rng, (1000, 1000), populate=False)
        keep_a = system.spawn_at(10, 10)
        system.spawn_at(20, 20, from_click=True)
        system.spawn_at(30, 30, from_click=True)
        keep_b = system.spawn_at(40, 40)

        system.tick_lifecycles()
        assert system.particles == [keep_a, keep_b]

    def test_collision_glow_counts_down(self, empty_system):
        particle = empty_system.spawn_at(100, 100)
        particle.collision_glow_timer = 2
        empty_system.tick_lifecycles()
        assert particle.collision_glow_timer == 1


class TestEvents:
    def test_resize_clamps_positions(self, empty_system):
        particle = empty_system.spawn_at(900, 950)
        particle.velocity[:] = (1.0, -1.0)

        empty_system.on_resize(800, 600)

        assert (empty_system.width, empty_system.height) == (800, 600)
        assert list(particle.position) == [800, 600]
        assert list(particle.velocity) == [1.0, -1.0]

    def test_pointer_repels_only_when_active(self, empty_system):
        particle = empty_system.spawn_at(550, 500)
        particle.velocity[:] = 0

        empty_system.update_pointer(500, 500, False)
        empty_system.update_particles()
        assert list(particle.velocity) == [0, 0]

        empty_system.update_pointer(500, 500, True)
        empty_system.update_particles()
        assert particle.velocity[0] > 0
        assert particle.pointer_affected

    def test_pointer_highlight_holds_while_pointer_is_outside(self, empty_system):
        particle = empty_system.spawn_at(550, 500)
        empty_system.update_pointer(500, 500, True)
        empty_system.update_particles()
        timer = particle.pointer_effect_timer

        empty_system.update_pointer(500, 500, False)
        for _ in range(15):
            empty_system.update_particles()
        assert particle.pointer_affected
        assert particle.pointer_effect_timer == timer
        assert particle.display_color == 255


class TestFrameStep:
    def test_collision_scenario_inside_frame(self, empty_system, screen):
        a = empty_system.spawn_at(100, 100)
        b = empty_system.spawn_at(105, 100)
        a.velocity[:] = (5, 0)
        b.velocity[:] = (-5, 0)

        empty_system.frame_step(screen)

        assert empty_system.collisions_last_frame == 1
        assert a.velocity[0] < 0 < b.velocity[0]
        assert a.display_state()[0] == 230

    def test_many_frames_keep_invariants(self, network_config, rng):
        screen = pygame.Surface((640, 480))
        system = ParticleSystem(network_config, rng, screen.get_size())
        system.update_pointer(320, 240, True)

        for frame in range(120):
            if frame % 20 == 0:
                system.on_click(100 + frame, 200)
            system.frame_step(screen)
            assert len(system.particles) <= network_config['max_particles']
            for p in system.particles:
                assert 0 <= p.position[0] <= 640
                assert 0 <= p.position[1] <= 480

        assert system.frame_count == 120

    def test_hud_text(self, empty_system):
        empty_system.spawn_at(1, 1)
        assert empty_system.hud_text() == "Particles: 1/200"

    def test_frame_draws_background_and_particles(self, empty_system, screen):
        particle = empty_system.spawn_at(500, 500)
        particle.velocity[:] = 0
        empty_system.frame_step(screen)

        assert tuple(screen.get_at((500, 500)))[:3] == (200, 200, 200)
        assert tuple(screen.get_at((900, 900)))[:3] == (0, 0, 0)


def test_diagnostics(empty_system):
    assert empty_system.get_average_speed() == 0.0
    a = empty_system.spawn_at(10, 10)
    b = empty_system.spawn_at(500, 500)
    a.velocity[:] = (3, 4)
    b.velocity[:] = (0, 1)
    assert empty_system.get_total_kinetic_energy() == pytest.approx(13.0)
    assert empty_system.get_average_speed() == pytest.approx(3.0)
