"""
Unit tests for composite models.

This test suite validates the model algebra:
- Sum and Convolution flux, extent and visibility rules
- Analyticity propagation, including the Convolution image axis
- Tree flattening with components()
- smoothed() as a Gaussian convolution
- Persistent reconstruction (with_components, with_params) and hashing
- Batch visibilities of trees holding a numerical leaf
"""

import unittest
import numpy as np

from vismodel import (AddModel, ConvolvedModel, Disk, Gaussian, IsAnalytic, NotAnalytic,
                      PointSource, ScaledModel, ShakuraSunyaevDisk, add, components, convolved,
                      flux, radialextent, smoothed, stretched, subtract, visibility)
from vismodel.exceptions import CapabilityError, ConstructionError, ShapeMismatchError
from vismodel.fourier import ImageGrid


class TestSum(unittest.TestCase):
    """Test cases for AddModel."""

    def setUp(self):
        """Set up test fixtures."""
        self.A = Gaussian(flux_density=1.0, sigma=1e-9)
        self.B = Disk(flux_density=2.0, radius=3e-9)
        self.m = add(self.A, self.B)

    def test_operator_builds_sum(self):
        """Test that + builds the same node as add()."""
        self.assertIsInstance(self.A + self.B, AddModel)
        self.assertEqual(self.A + self.B, self.m)

    def test_flux_additive(self):
        """Test flux(A + B) = 1 + 2 = 3."""
        self.assertAlmostEqual(float(flux(self.m)), 3.0, places=12)

    def test_visibility_at_origin(self):
        """Test V(A + B) at the origin equals the total flux."""
        vis = complex(visibility(self.m, 0.0, 0.0))
        expected = complex(visibility(self.A, 0.0, 0.0)) + complex(visibility(self.B, 0.0, 0.0))
        self.assertAlmostEqual(vis, expected, places=12)
        self.assertAlmostEqual(vis, 3.0, places=12)

    def test_visibility_additive(self):
        """Test V(A + B) = V(A) + V(B) at several frequencies."""
        for u, v in [(1e7, 0.0), (0.0, 5e7), (3e7, -4e7), (1.5e8, 2e8)]:
            with self.subTest(u=u, v=v):
                vis = complex(visibility(self.m, u, v))
                expected = complex(self.A.visibility_point(u, v)) + complex(self.B.visibility_point(u, v))
                self.assertAlmostEqual(vis, expected, places=12)

    def test_batch_visibilities_additive(self):
        """Test vectorized visibilities of a sum over arrays."""
        u = np.linspace(-2e8, 2e8, 11)
        v = np.linspace(1e8, -1e8, 11)
        vis = np.asarray(self.m.visibilities(u, v))
        expected = np.asarray(self.A.visibilities(u, v)) + np.asarray(self.B.visibilities(u, v))
        np.testing.assert_allclose(vis, expected, rtol=1e-12, atol=1e-15)
        self.assertEqual(vis.shape, u.shape)

    def test_intensity_additive(self):
        """Test intensities add pointwise."""
        x = np.array([0.0, 1e-9, 2.9e-9, 5e-9])
        y = np.zeros_like(x)
        np.testing.assert_allclose(np.asarray(self.m.intensities(x, y)),
                                   np.asarray(self.A.intensities(x, y)) + np.asarray(self.B.intensities(x, y)))

    def test_radialextent_is_max(self):
        """Test the extent of a sum is the max of the children's."""
        self.assertAlmostEqual(float(radialextent(self.m)), 5e-9, places=20)
        small = PointSource() + Gaussian(sigma=1e-10)
        self.assertAlmostEqual(float(radialextent(small)), 5e-10, places=20)

    def test_analyticity(self):
        """Test both axes AND-propagate."""
        self.assertIs(self.m.visanalytic, IsAnalytic)
        self.assertIs(self.m.imanalytic, IsAnalytic)

        with_point = self.A + PointSource()
        self.assertIs(with_point.visanalytic, IsAnalytic)
        self.assertIs(with_point.imanalytic, NotAnalytic)

        disk = ShakuraSunyaevDisk(I_0=1.0, R_0=10.0, R_in=6.0, distance=1e10)
        with_agn = self.A + disk
        self.assertIs(with_agn.visanalytic, NotAnalytic)
        self.assertIs(with_agn.imanalytic, IsAnalytic)

    def test_intensitymap_with_point_source(self):
        """Test a sum with a non-analytic image combines the children's maps."""
        grid = ImageGrid(2e-8, 2e-8, 64, 64)
        m = self.A + PointSource(flux_density=0.5)
        img = m.intensitymap(grid)
        expected = self.A.intensitymap(grid).image + PointSource(flux_density=0.5).intensitymap(grid).image
        np.testing.assert_allclose(img.image, expected)
        self.assertAlmostEqual(float(img.flux()), 1.5, places=6)

    def test_subtract(self):
        """Test m1 - m2 is a sum with a negatively scaled right operand."""
        m = subtract(self.B, self.A)
        self.assertIsInstance(m, AddModel)
        self.assertIsInstance(m.right, ScaledModel)
        self.assertEqual(self.B - self.A, m)
        self.assertAlmostEqual(float(flux(m)), 1.0, places=12)
        u, v = 4e7, 1e7
        expected = complex(self.B.visibility_point(u, v)) - complex(self.A.visibility_point(u, v))
        self.assertAlmostEqual(complex(visibility(m, u, v)), expected, places=12)


class TestConvolution(unittest.TestCase):
    """Test cases for ConvolvedModel."""

    def setUp(self):
        """Set up test fixtures."""
        self.A = Gaussian(flux_density=1.0, sigma=1.0)
        self.B = Gaussian(flux_density=2.0, sigma=1.0)
        self.m = convolved(self.A, self.B)

    def test_flux_multiplicative(self):
        """Test flux(A * B) = 1 * 2 = 2."""
        self.assertIsInstance(self.m, ConvolvedModel)
        self.assertAlmostEqual(float(flux(self.m)), 2.0, places=12)

    def test_visibility_multiplicative(self):
        """Test the convolution theorem on two Gaussians."""
        combined = Gaussian(flux_density=2.0, sigma=np.sqrt(2.0))
        for u, v in [(0.0, 0.0), (0.1, 0.0), (0.05, -0.2), (0.3, 0.3)]:
            with self.subTest(u=u, v=v):
                self.assertAlmostEqual(complex(visibility(self.m, u, v)),
                                       complex(combined.visibility_point(u, v)), places=12)

    def test_image_axis_never_analytic(self):
        """Test that a convolution of analytic models is NotAnalytic in the image domain."""
        self.assertIs(self.A.imanalytic, IsAnalytic)
        self.assertIs(self.B.imanalytic, IsAnalytic)
        self.assertIs(self.m.visanalytic, IsAnalytic)
        self.assertIs(self.m.imanalytic, NotAnalytic)

    def test_intensity_point_raises(self):
        """Test that pointwise intensity is not available for a convolution."""
        with self.assertRaises(CapabilityError):
            self.m.intensity_point(0.0, 0.0)
        with self.assertRaises(CapabilityError):
            self.m.intensities(np.zeros(3), np.zeros(3))
        with self.assertRaises(CapabilityError):
            self.m.xy_combinator()

    def test_intensitymap_through_fft(self):
        """Test the FFT intensity map of two Gaussians against the combined Gaussian."""
        grid = ImageGrid(20.0, 20.0, 128, 128)
        img = self.m.intensitymap(grid)
        expected = Gaussian(flux_density=2.0, sigma=np.sqrt(2.0)).intensitymap(grid)
        np.testing.assert_allclose(img.image, expected.image, rtol=0, atol=1e-10)
        self.assertAlmostEqual(float(img.flux()), 2.0, places=8)

    def test_point_source_kernel(self):
        """Test that convolving a point source with a Gaussian gives the Gaussian image."""
        grid = ImageGrid(20.0, 20.0, 64, 64)
        m = convolved(PointSource(flux_density=3.0), Gaussian(sigma=1.5))
        img = m.intensitymap(grid)
        expected = Gaussian(flux_density=3.0, sigma=1.5).intensitymap(grid)
        np.testing.assert_allclose(img.image, expected.image, rtol=0, atol=1e-10)

    def test_fouriermap_is_product(self):
        """Test the Fourier grid of a convolution is the product of the children's."""
        grid = ImageGrid(10.0, 10.0, 32, 32)
        np.testing.assert_allclose(self.m.fouriermap(grid),
                                   self.A.fouriermap(grid) * self.B.fouriermap(grid))

    def test_radialextent_is_max(self):
        """Test the extent of a convolution is the max of the children's."""
        m = convolved(Gaussian(sigma=1.0), Gaussian(sigma=3.0))
        self.assertAlmostEqual(float(radialextent(m)), 15.0)


class TestSmoothed(unittest.TestCase):
    """Test cases for smoothed()."""

    def test_equals_convolution_with_stretched_gaussian(self):
        """Test smoothed(m, s) is the same tree as convolved(m, stretched(Gaussian(), s, s))."""
        m = Disk(radius=2.0) + Gaussian(sigma=0.5)
        for sigma in [0.1, 1.0, 3.5]:
            with self.subTest(sigma=sigma):
                self.assertEqual(smoothed(m, sigma), convolved(m, stretched(Gaussian(), sigma, sigma)))

    def test_kernel_has_unit_flux(self):
        """Test smoothing leaves the flux unchanged."""
        m = Disk(flux_density=4.0, radius=1.0)
        self.assertAlmostEqual(float(smoothed(m, 0.3).flux()), 4.0, places=12)

    def test_smoothed_gaussian_visibility(self):
        """Test smoothing a Gaussian widens it in quadrature."""
        m = smoothed(Gaussian(sigma=0.3), 0.4)
        expected = Gaussian(sigma=0.5)
        for u in [0.0, 0.2, 0.7]:
            self.assertAlmostEqual(complex(visibility(m, u, 0.1)),
                                   complex(expected.visibility_point(u, 0.1)), places=12)

    def test_nonpositive_width_raises(self):
        """Test a non-positive kernel width is rejected."""
        for sigma in [0.0, -1.0]:
            with self.assertRaises(ValueError):
                smoothed(Gaussian(), sigma)


class TestComponents(unittest.TestCase):
    """Test cases for components()."""

    def setUp(self):
        self.a = Gaussian(sigma=1.0)
        self.b = Disk(radius=2.0)
        self.c = Gaussian(sigma=3.0)

    def test_primitive(self):
        """Test a primitive is its own single component."""
        self.assertEqual(len(components(self.a)), 1)
        self.assertIs(components(self.a)[0], self.a)

    def test_order(self):
        """Test components(A + B) is (A, B), never (B, A)."""
        leaves = components(Gaussian() + Disk())
        self.assertIsInstance(leaves, tuple)
        self.assertIsInstance(leaves[0], Gaussian)
        self.assertIsInstance(leaves[1], Disk)

    def test_associative(self):
        """Test flattening ignores nesting shape."""
        left = components((self.a + self.b) + self.c)
        right = components(self.a + (self.b + self.c))
        for leaves in (left, right):
            self.assertEqual(len(leaves), 3)
            for leaf, expected in zip(leaves, (self.a, self.b, self.c)):
                self.assertIs(leaf, expected)

    def test_duplicates_preserved(self):
        """Test a repeated leaf appears once per occurrence."""
        leaves = components(convolved(self.a, self.a) + self.a)
        self.assertEqual(len(leaves), 3)
        self.assertTrue(all(leaf is self.a for leaf in leaves))

    def test_modifier_is_a_leaf(self):
        """Test scaled models are not flattened."""
        leaves = components(self.a - self.b)
        self.assertIs(leaves[0], self.a)
        self.assertIsInstance(leaves[1], ScaledModel)


class TestReconstruction(unittest.TestCase):
    """Test cases for persistent reconstruction of trees."""

    def test_with_components(self):
        """Test with_components builds a new node and leaves the original untouched."""
        a, b, c = Gaussian(), Disk(), Gaussian(sigma=2.0)
        m = convolved(a, b)
        n = m.with_components(a, c)
        self.assertIsInstance(n, ConvolvedModel)
        self.assertIs(n.left, a)
        self.assertIs(n.right, c)
        self.assertIs(m.right, b)

    def test_with_params(self):
        """Test a tree rebuilt from its parameters is equal to it."""
        m = smoothed(Disk(radius=2.0), 0.5) + 0.5 * Gaussian()
        self.assertEqual(m.with_params(m.get_params()), m)

        params = m.get_params()
        params['m1']['m1']['radius'] = 3.0
        changed = m.with_params(params)
        self.assertNotEqual(changed, m)
        self.assertAlmostEqual(float(changed.left.left.radius), 3.0)
        self.assertAlmostEqual(float(m.left.left.radius), 2.0)

    def test_equality(self):
        """Test structural equality."""
        self.assertEqual(Gaussian() + Disk(), Gaussian() + Disk())
        self.assertNotEqual(Gaussian() + Disk(), Disk() + Gaussian())
        self.assertNotEqual(Gaussian() + Disk(), convolved(Gaussian(), Disk()))

    def test_hash_consistent_with_equality(self):
        """Test equal trees hash alike and can be used as dict keys."""
        self.assertEqual(hash(Gaussian()), hash(Gaussian(flux_density=1.0, sigma=1.0)))
        self.assertEqual({Gaussian(): 1}[Gaussian()], 1)

        trees = {smoothed(Disk(radius=2.0), 0.5) + 0.5 * Gaussian(),
                 smoothed(Disk(radius=2.0), 0.5) + 0.5 * Gaussian(),
                 convolved(Gaussian(), Disk())}
        self.assertEqual(len(trees), 2)
        self.assertIn(convolved(Gaussian(), Disk()), trees)
        self.assertNotIn(convolved(Disk(), Gaussian()), trees)


class TestNumericalVisibilities(unittest.TestCase):
    """Test cases for batch visibilities of trees with a non-analytic leaf."""

    def setUp(self):
        self.g = Gaussian(flux_density=0.5, sigma=2e-10)
        self.d = ShakuraSunyaevDisk(I_0=1.0, R_0=10.0, R_in=6.0, inclination=0.3,
                                    distance=1e10, GM_over_c2=1.0)
        fov = 2 * float(self.d.radialextent())
        self.u = np.array([0.0, 1.0, 2.5, -4.0, 7.0]) / fov
        self.v = np.array([0.0, -1.5, 3.0, 0.5, -6.0]) / fov
        self.vis_g = np.asarray(self.g.visibilities(self.u, self.v))
        self.vis_d = np.asarray(self.d.visibilities(self.u, self.v))
        self.atol = 1e-12 * (float(self.d.flux()) + 0.5)

    def test_sum_is_additive(self):
        """Test V(g + d) = V(g) + V(d)."""
        vis = (self.g + self.d).visibilities(self.u, self.v)
        np.testing.assert_allclose(vis, self.vis_g + self.vis_d, rtol=1e-10, atol=self.atol)

    def test_sum_order(self):
        """Test V(d + g) = V(d) + V(g)."""
        vis = (self.d + self.g).visibilities(self.u, self.v)
        np.testing.assert_allclose(vis, self.vis_d + self.vis_g, rtol=1e-10, atol=self.atol)

    def test_subtract_non_analytic_right(self):
        """Test V(g - d) = V(g) - V(d)."""
        vis = subtract(self.g, self.d).visibilities(self.u, self.v)
        np.testing.assert_allclose(vis, self.vis_g - self.vis_d, rtol=1e-10, atol=self.atol)

    def test_convolution_multiplies(self):
        """Test V(d * g) = V(d) V(g)."""
        vis = convolved(self.d, self.g).visibilities(self.u, self.v)
        np.testing.assert_allclose(vis, self.vis_d * self.vis_g, rtol=1e-10, atol=self.atol)


class TestCompositeErrors(unittest.TestCase):
    """Test cases for construction and evaluation errors."""

    def test_mismatched_precision(self):
        """Test combining float32 and float64 models is rejected at construction."""
        with self.assertRaises(ConstructionError):
            Gaussian(dtype=np.float32) + Gaussian()
        with self.assertRaises(ConstructionError):
            convolved(Disk(), Disk(dtype=np.float32))

    def test_same_precision(self):
        """Test float32 models combine with each other."""
        m = Gaussian(dtype=np.float32) + Disk(dtype=np.float32)
        self.assertEqual(m.dtype, np.dtype(np.float32))

    def test_non_model_operand(self):
        """Test combining a model with something else."""
        with self.assertRaises(ConstructionError):
            add(Gaussian(), 1.0)
        with self.assertRaises(TypeError):
            Gaussian() + 1.0

    def test_scalar_visibility_of_numeric_tree(self):
        """Test scalar visibility of a NotAnalytic composite raises."""
        m = Gaussian(sigma=1e-10) + ShakuraSunyaevDisk(I_0=1.0, R_0=10.0, R_in=6.0, distance=1e10)
        with self.assertRaises(CapabilityError):
            visibility(m, 0.0, 0.0)
        with self.assertRaises(CapabilityError):
            m.visibility_point(0.0, 0.0)

    def test_shape_mismatch(self):
        """Test paired arrays of different shapes are rejected."""
        m = Gaussian() + Disk()
        with self.assertRaises(ShapeMismatchError):
            m.visibilities(np.zeros(3), np.zeros(4))


if __name__ == '__main__':
    unittest.main()
