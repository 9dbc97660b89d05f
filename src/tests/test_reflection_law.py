"""
===============================================================================
SRP TOOLKIT - Reflection Law Test Suite
===============================================================================
Tests for the specular/diffuse mix reflection law: energy conservation of the
constructors, reaction vectors for absorbing, diffuse and specular surfaces,
instantaneous re-radiation, mirror reflection and bidirectional reflectance.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from core.constants import PI
from dynamics.reflection_law import (
    SpecularDiffuseMixReflectionLaw,
    compute_mirrorlike_reflection,
    reflection_law_from_absorptivity_and_diffuse_reflectivity,
    reflection_law_from_specular_and_diffuse_reflectivity,
    reflection_law_from_total_reflectivity,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def normal_z():
    """Surface normal along +Z."""
    return np.array([0.0, 0.0, 1.0])


@pytest.fixture
def head_on_z():
    """Radiation travelling along -Z, i.e. hitting a +Z face head-on."""
    return np.array([0.0, 0.0, -1.0])


@pytest.fixture
def oblique_45():
    """Radiation travelling along (1, 0, -1)/sqrt(2): 45 deg incidence on +Z."""
    return np.array([1.0, 0.0, -1.0]) / np.sqrt(2.0)


# =============================================================================
# Test: Construction and energy conservation
# =============================================================================

class TestConstruction:
    """Tests for constructors, factories and parameter validation."""

    @pytest.mark.parametrize("specular,diffuse", [
        (0.0, 0.0),
        (0.6, 0.0),
        (0.0, 1.0),
        (0.1, 0.2),
        (0.3, 0.3),
        (0.7, 0.3),
        (0.25, 0.45),
        (0.2, 0.1),
    ])
    def test_fractions_sum_to_one(self, specular, diffuse):
        """
        absorptivity + specular + diffuse == 1 for every valid pair.

        The derived absorptivity is 1 - s - d, so the floating-point total
        can land on a neighbour of 1.0 (e.g. 1.0000000000000002 for
        (0.2, 0.1)); it is exact up to the last couple of ulps.
        """
        law = reflection_law_from_specular_and_diffuse_reflectivity(specular, diffuse)
        total = law.absorptivity + law.specular_reflectivity + law.diffuse_reflectivity
        assert abs(total - 1.0) <= 2.0 * np.spacing(1.0)
        for fraction in (law.absorptivity, law.specular_reflectivity,
                         law.diffuse_reflectivity):
            assert 0.0 <= fraction <= 1.0

    def test_from_absorptivity_and_diffuse(self):
        """Whatever is neither absorbed nor diffused is reflected specularly."""
        law = reflection_law_from_absorptivity_and_diffuse_reflectivity(0.2, 0.5)
        assert law.absorptivity == pytest.approx(0.2)
        assert law.diffuse_reflectivity == pytest.approx(0.5)
        assert law.specular_reflectivity == pytest.approx(0.3)

    def test_from_total_reflectivity(self):
        """Total reflectivity 0.6 with a quarter specular."""
        law = reflection_law_from_total_reflectivity(0.6, 0.25)
        assert law.absorptivity == pytest.approx(0.4)
        assert law.specular_reflectivity == pytest.approx(0.15)
        assert law.diffuse_reflectivity == pytest.approx(0.45)

    def test_reradiation_flag_default_off(self):
        law = SpecularDiffuseMixReflectionLaw(0.2, 0.4, 0.4)
        assert law.with_instantaneous_reradiation is False

    @pytest.mark.parametrize("a,s,d", [
        (0.5, 0.5, 0.5),      # sum > 1
        (0.1, 0.1, 0.1),      # sum < 1
        (-0.1, 0.6, 0.5),     # negative absorptivity
        (0.0, 1.2, -0.2),     # specular > 1
    ])
    def test_invalid_fractions_raise(self, a, s, d):
        """Physically invalid materials fail at construction."""
        with pytest.raises(ValueError):
            SpecularDiffuseMixReflectionLaw(a, s, d)

    def test_factory_rejects_over_unity_reflectivity(self):
        """Specular + diffuse > 1 implies negative absorptivity."""
        with pytest.raises(ValueError):
            reflection_law_from_specular_and_diffuse_reflectivity(0.7, 0.5)

    def test_total_reflectivity_out_of_range(self):
        with pytest.raises(ValueError):
            reflection_law_from_total_reflectivity(1.5, 0.5)
        with pytest.raises(ValueError):
            reflection_law_from_total_reflectivity(0.5, -0.1)

    def test_law_is_read_only(self):
        """Material constants cannot be modified after construction."""
        law = SpecularDiffuseMixReflectionLaw(0.2, 0.4, 0.4)
        with pytest.raises(AttributeError):
            law.absorptivity = 0.5


# =============================================================================
# Test: Reaction vector
# =============================================================================

class TestReactionVector:
    """Tests for the force-per-area-per-pressure reaction vector."""

    def test_absorber_head_on(self, normal_z, head_on_z):
        """A black surface is pushed along the incoming direction."""
        law = SpecularDiffuseMixReflectionLaw(1.0, 0.0, 0.0)
        assert_allclose(law.evaluate_reaction_vector(normal_z, head_on_z),
                        [0.0, 0.0, -1.0], atol=1e-15)

    def test_mirror_head_on(self, normal_z, head_on_z):
        """A perfect mirror seen head-on receives twice the momentum."""
        law = SpecularDiffuseMixReflectionLaw(0.0, 1.0, 0.0)
        assert_allclose(law.evaluate_reaction_vector(normal_z, head_on_z),
                        [0.0, 0.0, -2.0], atol=1e-15)

    def test_diffuse_head_on(self, normal_z, head_on_z):
        """A Lambertian reflector adds 2/3 of the momentum along the normal."""
        law = SpecularDiffuseMixReflectionLaw(0.0, 0.0, 1.0)
        assert_allclose(law.evaluate_reaction_vector(normal_z, head_on_z),
                        [0.0, 0.0, -5.0 / 3.0], atol=1e-15)

    def test_mirror_oblique_is_along_normal(self, normal_z, oblique_45):
        """Specular reaction is purely normal and scales with cos(theta)."""
        law = SpecularDiffuseMixReflectionLaw(0.0, 1.0, 0.0)
        reaction = law.evaluate_reaction_vector(normal_z, oblique_45)
        assert_allclose(reaction, [0.0, 0.0, -np.sqrt(2.0)], atol=1e-15)

    def test_absorber_oblique_is_along_incidence(self, normal_z, oblique_45):
        law = SpecularDiffuseMixReflectionLaw(1.0, 0.0, 0.0)
        assert_allclose(law.evaluate_reaction_vector(normal_z, oblique_45),
                        oblique_45, atol=1e-15)

    def test_mixed_material(self, normal_z, oblique_45):
        """Superposition of the incidence and reflection terms."""
        a, s, d = 0.2, 0.5, 0.3
        law = SpecularDiffuseMixReflectionLaw(a, s, d)
        cos_theta = 1.0 / np.sqrt(2.0)
        expected = (a + d) * oblique_45 - (2.0 / 3.0 * d + 2.0 * s * cos_theta) * normal_z
        assert_allclose(law.evaluate_reaction_vector(normal_z, oblique_45),
                        expected, atol=1e-15)

    @pytest.mark.parametrize("incoming", [
        [0.0, 0.0, 1.0],                        # from behind
        [1.0, 0.0, 0.0],                        # grazing
        [0.6, 0.0, 0.8],                        # oblique from behind
    ])
    def test_back_face_gives_zero(self, normal_z, incoming):
        """No force when the radiation does not reach the front face."""
        law = SpecularDiffuseMixReflectionLaw(0.2, 0.4, 0.4)
        reaction = law.evaluate_reaction_vector(normal_z, np.array(incoming))
        assert np.array_equal(reaction, np.zeros(3))

    def test_instantaneous_reradiation(self, normal_z, head_on_z):
        """Absorbed energy re-emitted from the front adds 2/3 * a along -n."""
        with_rerad = SpecularDiffuseMixReflectionLaw(1.0, 0.0, 0.0, True)
        without = SpecularDiffuseMixReflectionLaw(1.0, 0.0, 0.0, False)
        assert_allclose(with_rerad.evaluate_reaction_vector(normal_z, head_on_z),
                        [0.0, 0.0, -5.0 / 3.0], atol=1e-15)
        assert_allclose(without.evaluate_reaction_vector(normal_z, head_on_z),
                        [0.0, 0.0, -1.0], atol=1e-15)

    def test_reradiation_irrelevant_without_absorption(self, normal_z, oblique_45):
        """Re-radiation only acts on absorbed energy."""
        with_rerad = SpecularDiffuseMixReflectionLaw(0.0, 0.5, 0.5, True)
        without = SpecularDiffuseMixReflectionLaw(0.0, 0.5, 0.5, False)
        assert_allclose(with_rerad.evaluate_reaction_vector(normal_z, oblique_45),
                        without.evaluate_reaction_vector(normal_z, oblique_45),
                        atol=1e-15)


# =============================================================================
# Test: Mirror reflection
# =============================================================================

class TestMirrorlikeReflection:
    """Tests for compute_mirrorlike_reflection."""

    def test_reflect_oblique(self, normal_z, oblique_45):
        reflected = compute_mirrorlike_reflection(oblique_45, normal_z)
        assert_allclose(reflected, np.array([1.0, 0.0, 1.0]) / np.sqrt(2.0),
                        atol=1e-15)

    def test_reflect_head_on(self, normal_z, head_on_z):
        assert_allclose(compute_mirrorlike_reflection(head_on_z, normal_z),
                        [0.0, 0.0, 1.0], atol=1e-15)

    @pytest.mark.parametrize("vector", [
        [0.0, 0.0, 1.0],
        [1.0, 0.0, 0.0],
        [0.0, 0.6, 0.8],
    ])
    def test_back_side_gives_zero(self, normal_z, vector):
        """Vectors not travelling into the front face are not reflected."""
        assert np.array_equal(
            compute_mirrorlike_reflection(np.array(vector), normal_z), np.zeros(3)
        )

    def test_reflection_preserves_length(self):
        v = np.array([0.3, -0.4, -0.5])
        n = np.array([0.0, 0.6, 0.8])
        assert np.linalg.norm(compute_mirrorlike_reflection(v, n)) == \
            pytest.approx(np.linalg.norm(v))


# =============================================================================
# Test: Reflected fraction
# =============================================================================

class TestReflectedFraction:
    """Tests for the bidirectional reflectance towards an observer."""

    def test_diffuse_only_off_mirror(self, normal_z, oblique_45):
        """Away from the mirror direction only the Lambertian term is seen."""
        law = SpecularDiffuseMixReflectionLaw(0.2, 0.5, 0.3)
        observer = np.array([0.0, 0.6, 0.8])
        assert law.evaluate_reflected_fraction(normal_z, oblique_45, observer) == \
            pytest.approx(0.3 / PI)

    def test_specular_on_mirror(self, normal_z, oblique_45):
        """An observer on the mirrored ray also sees s / cos(theta)."""
        law = SpecularDiffuseMixReflectionLaw(0.2, 0.5, 0.3)
        observer = np.array([1.0, 0.0, 1.0]) / np.sqrt(2.0)
        expected = 0.3 / PI + 0.5 * np.sqrt(2.0)
        assert law.evaluate_reflected_fraction(normal_z, oblique_45, observer) == \
            pytest.approx(expected)

    def test_specular_match_is_exact(self, normal_z, oblique_45):
        """A slightly misaligned observer gets no specular contribution."""
        law = SpecularDiffuseMixReflectionLaw(0.0, 1.0, 0.0)
        observer = np.array([1.0, 1e-6, 1.0])
        observer /= np.linalg.norm(observer)
        assert law.evaluate_reflected_fraction(normal_z, oblique_45, observer) == 0.0

    def test_observer_behind_surface(self, normal_z, head_on_z):
        law = SpecularDiffuseMixReflectionLaw(0.0, 0.0, 1.0)
        observer = np.array([0.0, 0.0, -1.0])
        assert law.evaluate_reflected_fraction(normal_z, head_on_z, observer) == 0.0

    def test_radiation_from_behind(self, normal_z):
        law = SpecularDiffuseMixReflectionLaw(0.0, 0.0, 1.0)
        incoming = np.array([0.0, 0.0, 1.0])
        observer = np.array([0.0, 0.0, 1.0])
        assert law.evaluate_reflected_fraction(normal_z, incoming, observer) == 0.0
