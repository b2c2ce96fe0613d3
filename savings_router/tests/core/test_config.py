import importlib
import os
import unittest
from unittest.mock import patch

from django.test import override_settings

from savings_router.core.config import SolveConfig
from savings_router.core.savings import SavingsFormula
from savings_router.core.variants import ShuffleMode
from savings_router import settings as router_settings


class TestSolveConfig(unittest.TestCase):

    def test_defaults(self):
        config = SolveConfig()
        self.assertEqual(config.shuffle_mode, ShuffleMode.FULL)
        self.assertEqual(config.savings_formula, SavingsFormula.SEPARATE_DEPOT)
        self.assertEqual(config.seed, router_settings.DEFAULT_RANDOM_SEED)
        self.assertTrue(config.tie_shuffle_only)
        self.assertIsNone(config.num_variants)

    def test_names_are_converted_to_enums(self):
        config = SolveConfig(shuffle_mode='partial', savings_formula='swapped_depot')
        self.assertIs(config.shuffle_mode, ShuffleMode.PARTIAL)
        self.assertIs(config.savings_formula, SavingsFormula.SWAPPED_DEPOT)

    def test_unknown_mode_raises(self):
        with self.assertRaises(ValueError):
            SolveConfig(shuffle_mode='sideways')

    def test_from_settings_reads_django_settings(self):
        # test_settings defines SAVINGS_ROUTER_N_OF_ROADS
        self.assertEqual(SolveConfig.from_settings().n_of_roads, 3)

    @override_settings(SAVINGS_ROUTER_SEED=7, SAVINGS_ROUTER_SHUFFLE_MODE='exhaustive')
    def test_from_settings_with_overridden_settings(self):
        config = SolveConfig.from_settings()
        self.assertEqual(config.seed, 7)
        self.assertEqual(config.shuffle_mode, ShuffleMode.EXHAUSTIVE)

    @override_settings(SAVINGS_ROUTER_SEED=7)
    def test_explicit_overrides_win(self):
        config = SolveConfig.from_settings(seed=11, num_variants=None)
        self.assertEqual(config.seed, 11)
        self.assertIsNone(config.num_variants)

    def test_unknown_override_raises(self):
        with self.assertRaises(ValueError):
            SolveConfig.from_settings(colour='red')

    def test_environment_uses_setting_names(self):
        env = {
            'SAVINGS_ROUTER_SEED': '7',
            'SAVINGS_ROUTER_PARTIAL_FRACTION': '0.5',
            'SAVINGS_ROUTER_N_OF_ROADS': '4',
            'SAVINGS_ROUTER_MIN_DIFFERENCE_THRESHOLD': '0.25',
        }
        try:
            with patch.dict(os.environ, env):
                importlib.reload(router_settings)
                self.assertEqual(router_settings.DEFAULT_RANDOM_SEED, 7)
                self.assertEqual(router_settings.PARTIAL_SHUFFLE_FRACTION, 0.5)
                self.assertEqual(router_settings.DEFAULT_N_OF_ROADS, 4)
                self.assertEqual(router_settings.MIN_DIFFERENCE_THRESHOLD, 0.25)
        finally:
            importlib.reload(router_settings)

    def test_resolve_num_variants(self):
        self.assertEqual(SolveConfig().resolve_num_variants(4), 4 * router_settings.VARIANTS_PER_WAYPOINT)
        self.assertEqual(SolveConfig(num_variants=3).resolve_num_variants(4), 3)
        self.assertEqual(SolveConfig().resolve_num_variants(0), 1)

    def test_resolve_positive_only(self):
        self.assertTrue(SolveConfig().resolve_positive_only())
        self.assertTrue(SolveConfig(shuffle_mode='partial').resolve_positive_only())
        self.assertFalse(SolveConfig(shuffle_mode='exhaustive').resolve_positive_only())
        self.assertTrue(SolveConfig(shuffle_mode='exhaustive', positive_only=True).resolve_positive_only())

    def test_validate(self):
        SolveConfig().validate()
        invalid = [
            {'min_difference_threshold': 1.5},
            {'min_difference_threshold': -0.1},
            {'partial_fraction': 2.0},
            {'num_variants': 0},
            {'max_attempts': 0},
            {'n_of_roads': 0},
        ]
        for values in invalid:
            with self.subTest(values=values):
                with self.assertRaises(ValueError):
                    SolveConfig(**values).validate()


if __name__ == '__main__':
    unittest.main()
